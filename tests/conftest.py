import io
import threading

import pytest
import requests
from PIL import Image

from catalogue_builder.images import ImageResolver, SanityImageUrlBuilder
from catalogue_builder.mailer import EMAIL_BODY, EMAIL_SUBJECT
from catalogue_builder.models import CatalogueItem

CDN = "https://cdn.sanity.io/images/lfss7ezq/production"


def png_bytes(size=(60, 40), color=(200, 30, 30, 255)):
    buf = io.BytesIO()
    Image.new("RGBA", size, color).save(buf, format="PNG")
    return buf.getvalue()


def jpeg_bytes(size=(40, 60), color=(20, 120, 200)):
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="JPEG")
    return buf.getvalue()


class FakeResponse:
    def __init__(self, content=b"", status_code=200, payload=None):
        self.content = content
        self.status_code = status_code
        self._payload = payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


class FakeSession:
    """
    Stands in for requests.Session. ``routes`` maps a URL to a FakeResponse or
    to an exception instance; URLs listed in ``blocked`` wait on ``release``.
    """

    def __init__(self, routes=None, blocked=()):
        self.routes = dict(routes or {})
        self.blocked = set(blocked)
        self.release = threading.Event()
        self.calls = []
        self._lock = threading.Lock()

    def get(self, url, params=None, headers=None, timeout=None):
        with self._lock:
            self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        if url in self.blocked:
            self.release.wait(5)
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(status_code=404)
        if isinstance(route, Exception):
            raise route
        return route


def asset_url(name, ext="png", width=1200):
    return f"{CDN}/{name}-60x40.{ext}?w={width}&auto=format"


def image_ref(name, ext="png"):
    return {"_type": "image", "asset": {"_ref": f"image-{name}-60x40-{ext}", "_type": "reference"}}


@pytest.fixture
def raw_items():
    """Five items from the catalogue store, already in ascending model order."""
    return [
        {"_id": "b1", "modelNumber": 1, "image": image_ref("aaa1"), "sizes": ["Adult"], "weightAdult": 10},
        {"_id": "b2", "modelNumber": 2, "image": image_ref("aaa2"), "sizes": ["Kids"], "weightKids": 5},
        {
            "_id": "b3",
            "modelNumber": 3,
            "image": image_ref("aaa3"),
            "sizes": ["Adult", "Kids"],
            "weightAdult": 12.5,
            "weightKids": 6,
        },
        {"_id": "b5", "modelNumber": 5, "image": image_ref("aaa5", "jpg"), "sizes": ["Adult"], "weightAdult": 9},
        {"_id": "b7", "modelNumber": 7, "image": image_ref("aaa7"), "sizes": ["Kids"], "weightKids": 4},
    ]


@pytest.fixture
def image_session():
    """Serves every sample image except B7's, which answers 404."""
    return FakeSession(
        {
            asset_url("aaa1"): FakeResponse(png_bytes()),
            asset_url("aaa2"): FakeResponse(png_bytes(color=(0, 200, 0, 255))),
            asset_url("aaa3"): FakeResponse(png_bytes(size=(30, 90))),
            asset_url("aaa5", "jpg"): FakeResponse(jpeg_bytes()),
        }
    )


@pytest.fixture
def resolver(image_session):
    return ImageResolver(SanityImageUrlBuilder("lfss7ezq", "production"), session=image_session)


class FakeStore:
    def __init__(self, raw_items, error=None):
        self.raw_items = raw_items
        self.error = error
        self.orders = []

    def fetch_items(self, order="asc"):
        self.orders.append(order)
        if self.error:
            raise self.error
        items = [CatalogueItem.from_dict(r) for r in self.raw_items]
        return sorted(items, key=lambda i: i.model_number, reverse=(order == "desc"))


class FakeMailer:
    def __init__(self, error=None):
        self.error = error
        self.sent = []

    async def send_with_attachment(self, to_email, attachment, filename, subject=EMAIL_SUBJECT, body=EMAIL_BODY):
        if self.error:
            raise self.error
        self.sent.append((to_email, attachment, filename))
