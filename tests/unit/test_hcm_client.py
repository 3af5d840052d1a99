import httpx
import pytest

from app.core.errors import FeedFetchFailed, HcmApiError
from app.services.hcm_client import HcmClient, worker_id_from_href


def _client(transport: httpx.MockTransport, credential: str = "Basic abc") -> HcmClient:
    return HcmClient(hostname="hcm.example.com", credential=credential, transport=transport)


@pytest.mark.asyncio
async def test_fetch_feed_since_passes_watermark_and_credential(fake_hcm_factory, feed_factory):
    hcm = fake_hcm_factory(feed=feed_factory("1001"))

    async with _client(hcm.transport) as client:
        body = await client.fetch_feed_since("2022-06-01T00:00:00.000Z")

    assert "1001" in body
    request = hcm.requests[0]
    assert request.url.path == "/hcmRestApi/atomservlet/employee/newhire"
    assert request.url.params["updated-min"] == "2022-06-01T00:00:00.000Z"
    assert request.headers["authorization"] == "Basic abc"


@pytest.mark.asyncio
async def test_fetch_feed_error_status_is_feed_fetch_failed(fake_hcm_factory):
    hcm = fake_hcm_factory(feed="Unauthorized", feed_status=401)

    async with _client(hcm.transport) as client:
        with pytest.raises(FeedFetchFailed, match="401"):
            await client.fetch_feed_since("2022-06-01T00:00:00.000Z")


@pytest.mark.asyncio
async def test_fetch_feed_transport_error_is_feed_fetch_failed():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    async with _client(httpx.MockTransport(handler)) as client:
        with pytest.raises(FeedFetchFailed):
            await client.fetch_feed_since("2022-06-01T00:00:00.000Z")


@pytest.mark.asyncio
async def test_search_workers_queries_by_person_number(fake_hcm_factory):
    hcm = fake_hcm_factory(workers={"1001": ["00020000000EACED"]})

    async with _client(hcm.transport) as client:
        workers = await client.search_workers("1001")

    assert len(workers) == 1
    assert hcm.requests[0].url.path == "/hcmRestApi/resources/11.13.18.05/workers"
    assert hcm.requests[0].url.params["q"] == "PersonNumber=1001"


@pytest.mark.asyncio
async def test_profile_photo_lifecycle(fake_hcm_factory):
    hcm = fake_hcm_factory(photos={"W1": 300})

    async with _client(hcm.transport) as client:
        photos = await client.find_profile_photos("W1")
        await client.delete_photo("W1", "300")
        after_delete = await client.find_profile_photos("W1")
        await client.add_profile_photo("W1", "aGVsbG8=")

    assert photos[0]["PhotoId"] == 300
    assert after_delete == []
    assert hcm.requests[0].url.params["q"] == 'PhotoType="PROFILE"'
    assert hcm.uploads["W1"] == {"PhotoType": "PROFILE", "Photo": "aGVsbG8="}


@pytest.mark.asyncio
async def test_api_error_status_raises_hcm_api_error(fake_hcm_factory):
    hcm = fake_hcm_factory(failures={("POST", "W1")})

    async with _client(hcm.transport) as client:
        with pytest.raises(HcmApiError) as exc:
            await client.add_profile_photo("W1", "aGVsbG8=")

    assert exc.value.status_code == 500


def test_worker_id_from_href():
    href = "https://hcm.example.com/hcmRestApi/resources/11.13.18.05/workers/00020000000EACED00057708"
    assert worker_id_from_href(href) == "00020000000EACED00057708"
    assert worker_id_from_href("https://hcm.example.com/hcmRestApi/resources/11.13.18.05/workers") is None
    assert worker_id_from_href("https://hcm.example.com/other/1") is None
