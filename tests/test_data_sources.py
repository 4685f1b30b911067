import json

import pytest
from reportlab.lib.units import mm

from catalogue_builder.data_sources import (
    JsonCatalogueStore,
    SanityCatalogueStore,
    build_store,
    load_config,
    merge_overrides,
)
from catalogue_builder.errors import ValidationFailed
from catalogue_builder.models import CatalogueConfig

from conftest import FakeResponse, FakeSession


def test_defaults_load_without_overrides(tmp_path):
    cfg = load_config(tmp_path / "missing.yml")
    assert cfg.brand_name == "BLOUDAN JEWELLERY"
    assert cfg.subtitle == "BANGLES CATALOGUE"
    assert cfg.accent_color == "#c7a332"
    assert cfg.page.margin == pytest.approx(8 * mm)
    assert cfg.fetch_workers == 6
    assert cfg.proxy_allowed_hosts == ("cdn.sanity.io",)
    assert cfg.sanity_project_id == "lfss7ezq"


def test_override_file_is_merged_over_defaults(tmp_path):
    override = tmp_path / "catalogue.yml"
    override.write_text(
        "brand:\n  subtitle: KIDS BANGLES\n"
        "fetch:\n  workers: 2\n  proxy_base_url: http://localhost:5000\n"
        "paths:\n  items_json: data/items.json\n"
        "page:\n  margin: 10\n",
        encoding="utf-8",
    )
    cfg = load_config(override)
    assert cfg.subtitle == "KIDS BANGLES"
    assert cfg.brand_name == "BLOUDAN JEWELLERY"
    assert cfg.fetch_workers == 2
    assert cfg.fetch_timeout == 5.0
    assert cfg.proxy_base_url == "http://localhost:5000"
    assert cfg.items_json == tmp_path / "data" / "items.json"
    assert cfg.page.margin == pytest.approx(10 * mm)
    assert cfg.page.h_pitch == pytest.approx(100 * mm)


def test_merge_overrides_is_shallow_per_section():
    target = {"brand": {"name": "A", "subtitle": "B"}, "x": 1}
    merge_overrides(target, {"brand": {"name": "C"}, "x": 2})
    assert target == {"brand": {"name": "C", "subtitle": "B"}, "x": 2}


def test_json_store_orders_by_model_number(tmp_path, raw_items):
    path = tmp_path / "items.json"
    path.write_text(json.dumps({"items": list(reversed(raw_items))}), encoding="utf-8")
    store = JsonCatalogueStore(path)
    assert [i.model_number for i in store.fetch_items("asc")] == [1, 2, 3, 5, 7]
    assert [i.model_number for i in store.fetch_items("desc")] == [7, 5, 3, 2, 1]
    with pytest.raises(ValidationFailed):
        store.fetch_items("sideways")


def test_sanity_store_runs_groq_query(raw_items):
    store = SanityCatalogueStore("lfss7ezq", "production", "2023-01-01", token="secret")
    store.session = FakeSession({store.query_url: FakeResponse(payload={"result": raw_items})})

    items = store.fetch_items("desc")

    assert store.query_url == "https://lfss7ezq.api.sanity.io/v2023-01-01/data/query/production"
    call = store.session.calls[0]
    assert call["params"]["query"] == (
        '*[_type == "catalogueItem"] | order(modelNumber desc)'
        "{_id, modelNumber, image, sizes, weightAdult, weightKids}"
    )
    assert call["headers"]["Authorization"] == "Bearer secret"
    assert len(items) == 5


def test_build_store_prefers_local_json(tmp_path):
    cfg = CatalogueConfig.default()
    assert isinstance(build_store(cfg), SanityCatalogueStore)
    cfg.items_json = tmp_path / "items.json"
    assert isinstance(build_store(cfg), JsonCatalogueStore)


@pytest.mark.parametrize(
    "records",
    [
        [{"_id": "a", "modelNumber": "x", "sizes": ["Adult"]}],
        ["B1"],
        [{"_id": "a", "modelNumber": 2, "sizes": ["Adult"]}, {"_id": "b", "sizes": ["Kids"]}],
    ],
)
def test_json_store_rejects_bad_records(tmp_path, records):
    path = tmp_path / "items.json"
    path.write_text(json.dumps(records), encoding="utf-8")
    with pytest.raises(ValidationFailed):
        JsonCatalogueStore(path).fetch_items("desc")


def test_json_store_rejects_missing_or_malformed_file(tmp_path):
    with pytest.raises(ValidationFailed):
        JsonCatalogueStore(tmp_path / "nowhere.json").fetch_items()

    broken = tmp_path / "broken.json"
    broken.write_text("[{", encoding="utf-8")
    with pytest.raises(ValidationFailed):
        JsonCatalogueStore(broken).fetch_items()
