from typing import Any
from urllib.parse import urlsplit

import httpx

from app.core.config import Settings
from app.core.errors import FeedFetchFailed, HcmApiError
from app.core.logging import get_logger, log_fields

logger = get_logger(__name__)


def worker_id_from_href(href: str) -> str | None:
    segments = [part for part in urlsplit(href).path.split("/") if part]
    if "workers" not in segments:
        return None
    idx = segments.index("workers")
    if idx + 1 >= len(segments):
        return None
    return segments[idx + 1]


class HcmClient:
    def __init__(
        self,
        *,
        hostname: str,
        credential: str,
        api_version: str = "11.13.18.05",
        feed_path: str = "/hcmRestApi/atomservlet/employee/newhire",
        timeout_seconds: float | None = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.hostname = hostname
        self.feed_path = feed_path
        self.resources_path = f"/hcmRestApi/resources/{api_version}"
        self._client = httpx.AsyncClient(
            base_url=f"https://{hostname}",
            headers={"Authorization": credential},
            timeout=timeout_seconds,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        hostname: str,
        credential: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "HcmClient":
        return cls(
            hostname=hostname,
            credential=credential,
            api_version=settings.hcm_api_version,
            feed_path=settings.hcm_feed_path,
            timeout_seconds=settings.http_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "HcmClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_feed_since(self, watermark: str) -> str:
        chunks: list[bytes] = []
        try:
            async with self._client.stream(
                "GET", self.feed_path, params={"updated-min": watermark}
            ) as response:
                async for chunk in response.aiter_bytes():
                    chunks.append(chunk)
        except httpx.HTTPError as exc:
            raise FeedFetchFailed(f"Unable to fetch new hire feed: {exc}") from exc

        body = b"".join(chunks).decode("utf-8", errors="replace")
        if response.status_code >= 400:
            raise FeedFetchFailed(f"Feed request failed ({response.status_code}): {body[:300]}")
        logger.info("Feed retrieved", extra=log_fields(watermark=watermark, length=len(body)))
        return body

    async def _request_json(self, method: str, path: str, **kwargs) -> dict[str, Any]:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise HcmApiError(f"{method} {path} failed: {exc}") from exc

        if response.status_code >= 400:
            raise HcmApiError(
                f"{method} {path} failed ({response.status_code}): {response.text[:300]}",
                status_code=response.status_code,
            )
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as exc:
            raise HcmApiError(f"{method} {path} returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise HcmApiError(f"{method} {path} returned an unexpected payload")
        return data

    async def search_workers(self, person_number: str) -> list[dict[str, Any]]:
        data = await self._request_json(
            "GET",
            f"{self.resources_path}/workers",
            params={"q": f"PersonNumber={person_number}"},
        )
        items = data.get("items") or []
        return [item for item in items if isinstance(item, dict)]

    async def find_profile_photos(self, worker_id: str) -> list[dict[str, Any]]:
        data = await self._request_json(
            "GET",
            f"{self.resources_path}/workers/{worker_id}/child/photos",
            params={"q": 'PhotoType="PROFILE"'},
        )
        if int(data.get("count") or 0) <= 0:
            return []
        return [item for item in data.get("items") or [] if isinstance(item, dict)]

    async def delete_photo(self, worker_id: str, photo_id: str) -> None:
        await self._request_json(
            "DELETE",
            f"{self.resources_path}/workers/{worker_id}/child/photos/{photo_id}",
        )

    async def add_profile_photo(self, worker_id: str, photo_base64: str) -> dict[str, Any]:
        return await self._request_json(
            "POST",
            f"{self.resources_path}/workers/{worker_id}/child/photos",
            json={"PhotoType": "PROFILE", "Photo": photo_base64},
        )
