import base64
import json
import re

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from app.core.config import Settings
from app.core.errors import BlobStoreError
from app.core.models import SyncRequest
from app.services.blob_store import MemoryBlobStore
from app.services.request_signer import RequestSigner

HCM_HOST = "hcm.example.com"
VAULT_HOST = "secrets.vaults.example.com"
NAMESPACE = "tenancy-ns"
BUCKET = "hcm-photos"
FEED_PATH = "/hcmRestApi/atomservlet/employee/newhire"
PHOTO_PATH = re.compile(r"/workers/([^/]+)/child/photos(?:/([^/]+))?$")


def make_feed(*people: str, updated: str = "2022-06-02T10:15:30.000Z") -> str:
    entries = "".join(
        "<entry>\n"
        f"<title>New hire {person}</title>\n"
        f"<updated>{updated}</updated>\n"
        '<content type="text"><![CDATA[{\n'
        f'  "Context" : [ {{"PersonNumber" : "{person}", "PersonName" : "Person {person}"}} ]\n'
        "}]]></content>\n"
        "</entry>\n"
        for person in people
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<feed xmlns="http://www.w3.org/2005/Atom">\n'
        "<title>newhire</title>\n"
        f"<updated>{updated}</updated>\n"
        f"{entries}"
        "</feed>\n"
    )


class FakeHcm:
    """In-process stand-in for the HCM REST surface, served through httpx.MockTransport."""

    def __init__(
        self,
        *,
        feed: str = "",
        workers: dict[str, list[str]] | None = None,
        photos: dict[str, int] | None = None,
        failures: set[tuple[str, str]] | None = None,
        feed_status: int = 200,
    ) -> None:
        self.feed = feed
        self.workers = workers or {}
        self.photos = dict(photos or {})
        self.failures = failures or set()
        self.feed_status = feed_status
        self.calls: list[tuple[str, str]] = []
        self.requests: list[httpx.Request] = []
        self.uploads: dict[str, dict] = {}

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append((request.method, path))
        self.requests.append(request)

        if path == FEED_PATH:
            return httpx.Response(self.feed_status, text=self.feed)

        if path.endswith("/workers"):
            person_number = request.url.params["q"].split("=", 1)[1]
            if ("GET", person_number) in self.failures:
                return httpx.Response(500, text="worker lookup failed")
            items = [
                {
                    "PersonNumber": person_number,
                    "links": [
                        {
                            "rel": "self",
                            "href": f"https://{HCM_HOST}/hcmRestApi/resources/11.13.18.05/workers/{worker_id}",
                        }
                    ],
                }
                for worker_id in self.workers.get(person_number, [])
            ]
            return httpx.Response(200, json={"items": items, "count": len(items)})

        match = PHOTO_PATH.search(path)
        if not match:
            return httpx.Response(404, text="unknown resource")
        worker_id, photo_id = match.groups()
        if (request.method, worker_id) in self.failures:
            return httpx.Response(500, text=f"{request.method} failed")

        if request.method == "GET":
            existing = self.photos.get(worker_id)
            items = [{"PhotoId": existing, "PhotoType": "PROFILE"}] if existing else []
            return httpx.Response(200, json={"items": items, "count": len(items)})
        if request.method == "DELETE":
            self.photos.pop(worker_id, None)
            return httpx.Response(204)
        if request.method == "POST":
            body = json.loads(request.content)
            self.uploads[worker_id] = body
            self.photos[worker_id] = 900
            return httpx.Response(201, json={"PhotoId": 900, **body})
        return httpx.Response(405)

    def calls_for(self, method: str) -> list[str]:
        return [path for verb, path in self.calls if verb == method]


class FlakyBlobStore(MemoryBlobStore):
    """Memory store whose reads of selected objects fail."""

    def __init__(self, objects=None, failing: set[str] | None = None) -> None:
        super().__init__(objects)
        self.failing = failing or set()
        self.reads: list[str] = []
        self.writes: list[str] = []

    async def read(self, namespace: str, bucket: str, name: str) -> bytes | None:
        self.reads.append(name)
        if name in self.failing:
            raise BlobStoreError(f"Error fetching object {name}")
        return await super().read(namespace, bucket, name)

    async def write(self, namespace: str, bucket: str, name: str, data: bytes) -> None:
        self.writes.append(name)
        await super().write(namespace, bucket, name, data)


class StaticSecretResolver:
    def __init__(self, credential: str = "Basic dXNlcjpwYXNz", error: Exception | None = None) -> None:
        self.credential = credential
        self.error = error
        self.calls: list[tuple[str, str, str]] = []

    async def fetch_secret(self, secret_id: str, compartment_id: str, vault_host: str) -> str:
        self.calls.append((secret_id, compartment_id, vault_host))
        if self.error:
            raise self.error
        return self.credential


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(rsa_key) -> bytes:
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


@pytest.fixture
def signer(private_key_pem) -> RequestSigner:
    return RequestSigner("ST$test-rpst-token", private_key_pem)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        blob_store_backend="memory",
        photo_transform="passthrough",
        photo_encoding="base64",
        default_photo_object="defaultPhoto",
        dead_letter_prefix="failed-hires/",
    )


@pytest.fixture
def sync_request() -> SyncRequest:
    return SyncRequest(
        bucket=BUCKET,
        namespace=NAMESPACE,
        object="config.json",
        hostname=VAULT_HOST,
        compartmentOcid="ocid1.compartment.oc1..example",
        secretOcid="ocid1.vaultsecret.oc1..example",
        hcmhostname=HCM_HOST,
    )


@pytest.fixture
def photo_b64() -> bytes:
    return base64.b64encode(b"raw-photo-bytes")


@pytest.fixture
def fake_hcm_factory():
    return FakeHcm


@pytest.fixture
def blob_store_factory():
    return FlakyBlobStore


@pytest.fixture
def secret_resolver_factory():
    return StaticSecretResolver


@pytest.fixture
def feed_factory():
    return make_feed
