from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

import requests
import yaml

from .errors import ValidationFailed
from .logging_utils import get_logger
from .models import CatalogueConfig, CatalogueItem

logger = get_logger(__name__)

DEFAULTS_CONFIG_PATH = Path(__file__).resolve().parent / "config" / "catalogue.defaults.yml"
DEFAULT_CONFIG_PATH = Path.cwd() / "catalogue.yml"

ITEM_PROJECTION = "{_id, modelNumber, image, sizes, weightAdult, weightKids}"


def load_yaml_config(path: Path | None = None) -> Dict[str, Any]:
    """
    Load a single catalogue YAML config. Returns empty dict if file is missing.
    """
    cfg_path = path or DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        return {}
    with open(cfg_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def merge_overrides(target: dict, override: dict):
    """
    Shallow merge of override dict into target; modifies target in place.
    """
    if not override:
        return
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(target.get(k), dict):
            target[k].update(v)
        else:
            target[k] = v


def load_config(path: Path | None = None, root: Path | None = None) -> CatalogueConfig:
    """
    Load defaults + overrides.
    - Defaults live in config/catalogue.defaults.yml (shipped with the package)
    - User/project overrides live in catalogue.yml (or a custom `path`)
    Relative paths in the config resolve against `root` (the override file's
    directory when one is given).
    """
    merged_cfg: Dict[str, Any] = {}
    merge_overrides(merged_cfg, load_yaml_config(DEFAULTS_CONFIG_PATH))
    merge_overrides(merged_cfg, load_yaml_config(path))
    if root is None and path is not None:
        root = Path(path).resolve().parent
    return CatalogueConfig.from_dict(merged_cfg, root=root)


# ---------------- Catalogue stores ----------------

def _check_order(order: str) -> None:
    if order not in ("asc", "desc"):
        raise ValidationFailed(f"order must be 'asc' or 'desc', got {order!r}")


class JsonCatalogueStore:
    """Catalogue items kept in a local JSON file (a list of store records)."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def fetch_records(self) -> List[Dict[str, Any]]:
        """Raw records in file order. Raises ValidationFailed for a missing or malformed file."""
        if not self.path.is_file():
            raise ValidationFailed(f"catalogue file not found: {self.path}")
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValidationFailed(f"{self.path} is not valid JSON: {exc}") from exc
        if isinstance(data, dict):
            data = data.get("items", [])
        if not isinstance(data, list):
            raise ValidationFailed(f"{self.path} must contain a list of items")
        return data

    def fetch_items(self, order: str = "asc") -> List[CatalogueItem]:
        """Validate every record, then order by model number."""
        _check_order(order)
        items = [CatalogueItem.from_dict(r) for r in self.fetch_records()]
        return sorted(items, key=lambda item: item.model_number, reverse=(order == "desc"))


class SanityCatalogueStore:
    """Catalogue items queried from Sanity's HTTP query API with GROQ."""

    def __init__(
        self,
        project_id: str,
        dataset: str = "production",
        api_version: str = "2023-01-01",
        token: str | None = None,
        session: requests.Session | None = None,
        timeout: float = 30,
    ):
        self.project_id = project_id
        self.dataset = dataset
        self.api_version = api_version
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: CatalogueConfig, token: str | None = None, session=None) -> "SanityCatalogueStore":
        return cls(
            config.sanity_project_id,
            config.sanity_dataset,
            config.sanity_api_version,
            token=token,
            session=session,
        )

    @property
    def query_url(self) -> str:
        version = self.api_version if self.api_version.startswith("v") else f"v{self.api_version}"
        return f"https://{self.project_id}.api.sanity.io/{version}/data/query/{self.dataset}"

    @staticmethod
    def build_query(order: str = "asc") -> str:
        _check_order(order)
        return f'*[_type == "catalogueItem"] | order(modelNumber {order}){ITEM_PROJECTION}'

    def fetch_records(self, order: str = "asc") -> List[Dict[str, Any]]:
        query = self.build_query(order)
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        logger.info("Querying Sanity catalogue (%s/%s, order=%s)", self.project_id, self.dataset, order)
        resp = self.session.get(self.query_url, params={"query": query}, headers=headers, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json().get("result") or []

    def fetch_items(self, order: str = "asc") -> List[CatalogueItem]:
        return [CatalogueItem.from_dict(r) for r in self.fetch_records(order)]


def build_store(config: CatalogueConfig, token: str | None = None):
    """Local JSON file when one is configured, Sanity otherwise."""
    if config.items_json:
        return JsonCatalogueStore(config.items_json)
    return SanityCatalogueStore.from_config(config, token=token)


__all__ = [
    "load_yaml_config",
    "merge_overrides",
    "load_config",
    "DEFAULT_CONFIG_PATH",
    "DEFAULTS_CONFIG_PATH",
    "JsonCatalogueStore",
    "SanityCatalogueStore",
    "build_store",
]
