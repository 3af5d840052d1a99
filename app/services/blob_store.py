from abc import ABC, abstractmethod
from pathlib import Path
from urllib.parse import quote

import httpx

from app.core.config import Settings
from app.core.errors import BlobStoreError
from app.services.request_signer import RequestSigner


class BlobStore(ABC):
    """Object storage addressed by (namespace, bucket, object name).

    ``read`` returns ``None`` when the object does not exist and raises
    ``BlobStoreError`` for every other failure.
    """

    @abstractmethod
    async def read(self, namespace: str, bucket: str, name: str) -> bytes | None:
        raise NotImplementedError

    @abstractmethod
    async def write(self, namespace: str, bucket: str, name: str, data: bytes) -> None:
        raise NotImplementedError


class MemoryBlobStore(BlobStore):
    def __init__(self, objects: dict[tuple[str, str, str], bytes] | None = None) -> None:
        self.objects: dict[tuple[str, str, str], bytes] = dict(objects or {})

    async def read(self, namespace: str, bucket: str, name: str) -> bytes | None:
        return self.objects.get((namespace, bucket, name))

    async def write(self, namespace: str, bucket: str, name: str, data: bytes) -> None:
        self.objects[(namespace, bucket, name)] = bytes(data)


class LocalBlobStore(BlobStore):
    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _path(self, namespace: str, bucket: str, name: str) -> Path:
        base = (self.root / namespace / bucket).resolve()
        path = (base / name).resolve()
        if base not in path.parents:
            raise BlobStoreError(f"Object name escapes bucket: {name}")
        return path

    async def read(self, namespace: str, bucket: str, name: str) -> bytes | None:
        path = self._path(namespace, bucket, name)
        if not path.exists():
            return None
        try:
            return path.read_bytes()
        except OSError as exc:
            raise BlobStoreError(f"Unable to read {name}: {exc}") from exc

    async def write(self, namespace: str, bucket: str, name: str, data: bytes) -> None:
        path = self._path(namespace, bucket, name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise BlobStoreError(f"Unable to write {name}: {exc}") from exc


class ObjectStorageBlobStore(BlobStore):
    """OCI Object Storage over its REST API, signed with the resource principal."""

    def __init__(
        self,
        *,
        host: str,
        signer: RequestSigner,
        timeout_seconds: float | None = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not host:
            raise ValueError("OBJECT_STORAGE_HOST is required when BLOB_STORE_BACKEND=oci")
        self.host = host
        self.signer = signer
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    def _url(self, namespace: str, bucket: str, name: str) -> str:
        return (
            f"https://{self.host}/n/{quote(namespace, safe='')}"
            f"/b/{quote(bucket, safe='')}/o/{quote(name, safe='')}"
        )

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                auth=self.signer,
                timeout=self.timeout_seconds,
                transport=self.transport,
            ) as client:
                return await client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise BlobStoreError(f"{method} {url} failed: {exc}") from exc

    async def read(self, namespace: str, bucket: str, name: str) -> bytes | None:
        response = await self._send("GET", self._url(namespace, bucket, name))
        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise BlobStoreError(f"Error fetching object {name} ({response.status_code}): {response.text[:300]}")
        return response.content

    async def write(self, namespace: str, bucket: str, name: str, data: bytes) -> None:
        response = await self._send(
            "PUT",
            self._url(namespace, bucket, name),
            content=data,
            headers={"content-type": "application/octet-stream"},
        )
        if response.status_code >= 400:
            raise BlobStoreError(f"Error storing object {name} ({response.status_code}): {response.text[:300]}")


def build_blob_store(settings: Settings) -> BlobStore:
    backend = (settings.blob_store_backend or "local").strip().lower()
    if backend == "memory":
        return MemoryBlobStore()
    if backend == "local":
        return LocalBlobStore(settings.blob_store_root)
    if backend == "oci":
        return ObjectStorageBlobStore(
            host=settings.object_storage_host,
            signer=RequestSigner.from_resource_principal(settings),
            timeout_seconds=settings.http_timeout_seconds,
        )
    raise ValueError("Unsupported BLOB_STORE_BACKEND. Supported values: local, memory, oci.")
