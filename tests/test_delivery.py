import io

import pytest

from catalogue_builder.delivery import (
    EMAIL_ACK_MESSAGE,
    DownloadLinkTarget,
    FileSaveTarget,
    StreamSaveTarget,
    request_email_delivery,
    save_locally,
)
from catalogue_builder.errors import DeliveryUnsupported, ValidationFailed
from catalogue_builder.models import Document, RenderFilter


@pytest.fixture
def document():
    return Document(pages=(), content=b"%PDF-1.4 test", filename="BLOUDAN_BANGLES_CATALOGUE.pdf", render_filter=RenderFilter.BOTH)


def test_native_save_wins_when_available(document, tmp_path):
    stream = io.BytesIO()
    receipt = save_locally(
        document,
        [FileSaveTarget(lambda name: tmp_path / "out" / name), StreamSaveTarget(stream)],
    )
    assert receipt.target == "file"
    assert (tmp_path / "out" / document.filename).read_bytes() == document.content
    assert stream.getvalue() == b""


def test_cancelled_dialog_falls_back_to_download_link(document, tmp_path):
    receipt = save_locally(
        document,
        [FileSaveTarget(lambda name: None), DownloadLinkTarget(tmp_path / "public", "https://shop.test/files/")],
    )
    assert receipt.target == "download-link"
    assert receipt.location == "https://shop.test/files/BLOUDAN_BANGLES_CATALOGUE.pdf"
    assert (tmp_path / "public" / document.filename).exists()


def test_stream_is_the_last_resort(document):
    stream = io.BytesIO()
    receipt = save_locally(document, [FileSaveTarget(None), DownloadLinkTarget(None), StreamSaveTarget(stream)])
    assert receipt.target == "blob"
    assert receipt.size == len(document.content)
    assert stream.getvalue() == document.content


def test_no_tier_available_raises(document):
    with pytest.raises(DeliveryUnsupported):
        save_locally(document, [FileSaveTarget(None), DownloadLinkTarget(None), StreamSaveTarget(None)])


def test_email_request_is_acknowledged_before_the_job_runs():
    scheduled = []

    def job(*args, **kwargs):
        raise AssertionError("job must not run synchronously")

    ack = request_email_delivery(
        lambda fn, *args, **kwargs: scheduled.append((fn, args, kwargs)),
        "buyer@example.com",
        "Kids",
        job,
        order="desc",
    )
    assert ack == {"success": True, "message": EMAIL_ACK_MESSAGE}
    fn, args, kwargs = scheduled[0]
    assert fn is job
    assert args == ("buyer@example.com", RenderFilter.KIDS)
    assert kwargs == {"order": "desc"}


@pytest.mark.parametrize("recipient, render_filter", [("", "Both"), ("a@b.test", "Nope"), ("a@b.test", None)])
def test_email_request_validates_before_scheduling(recipient, render_filter):
    scheduled = []
    with pytest.raises(ValidationFailed):
        request_email_delivery(lambda *a, **k: scheduled.append(a), recipient, render_filter, print)
    assert scheduled == []
