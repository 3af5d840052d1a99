import base64
import binascii
import json

import httpx

from app.core.config import Settings
from app.core.errors import SecretFetchFailed
from app.core.logging import get_logger, log_fields
from app.services.request_signer import RequestSigner

SECRET_BUNDLE_PATH = "/20190301/secretbundles/{secret_id}"

logger = get_logger(__name__)


class SecretResolver:
    def __init__(
        self,
        signer: RequestSigner,
        *,
        timeout_seconds: float | None = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.signer = signer
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    async def fetch_secret(self, secret_id: str, compartment_id: str, vault_host: str) -> str:
        url = f"https://{vault_host}{SECRET_BUNDLE_PATH.format(secret_id=secret_id)}"
        headers = {"compartmentId": compartment_id, "stage": "CURRENT"}

        try:
            async with httpx.AsyncClient(
                auth=self.signer,
                timeout=self.timeout_seconds,
                transport=self.transport,
            ) as client:
                response = await client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("Secret bundle request failed", extra=log_fields(secret_id=secret_id))
            raise SecretFetchFailed(f"Unable to get secret from vault: {exc}") from exc

        if response.status_code >= 400:
            raise SecretFetchFailed(
                f"Secret bundle request failed ({response.status_code}): {response.text[:300]}"
            )
        return decode_secret_bundle(response.text)


def decode_secret_bundle(body: str) -> str:
    try:
        content = json.loads(body)["secretBundleContent"]["content"]
    except (json.JSONDecodeError, KeyError, TypeError) as exc:
        raise SecretFetchFailed(f"Malformed secret bundle: {exc!r}") from exc
    if not isinstance(content, str):
        raise SecretFetchFailed("Malformed secret bundle: content is not a string")
    try:
        return base64.b64decode(content, validate=True).decode("ascii")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise SecretFetchFailed(f"Secret content is not valid base64 text: {exc}") from exc


def build_secret_resolver(settings: Settings) -> SecretResolver:
    return SecretResolver(
        RequestSigner.from_resource_principal(settings),
        timeout_seconds=settings.http_timeout_seconds,
    )
