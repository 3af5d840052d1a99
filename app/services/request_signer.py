"""HTTP-signature request signing for resource-principal authenticated calls.

Implements the subset of draft-cavage-http-signatures used by OCI services:
an RSA-SHA256 signature over a fixed, ordered set of headers, sent as
``Authorization: Signature version="1",keyId=...``.
"""

import base64
import hashlib
import os
from email.utils import formatdate
from pathlib import Path
from typing import Generator

import httpx
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from app.core.config import Settings
from app.core.errors import SigningKeyError

ALGORITHM = "rsa-sha256"
BASE_HEADERS = ["(request-target)", "host", "date"]
BODY_HEADERS = ["content-type", "content-length", "x-content-sha256"]
BODIED_METHODS = {"POST", "PUT"}


def body_digest(body: bytes) -> str:
    return base64.b64encode(hashlib.sha256(body).digest()).decode("ascii")


def headers_to_sign(method: str) -> list[str]:
    if method.upper() in BODIED_METHODS:
        return BASE_HEADERS + BODY_HEADERS
    return list(BASE_HEADERS)


def _load_private_key(private_key_pem: str | bytes, passphrase: str | None) -> rsa.RSAPrivateKey:
    data = private_key_pem.encode("ascii") if isinstance(private_key_pem, str) else private_key_pem
    password = passphrase.encode("utf-8") if passphrase else None
    try:
        key = serialization.load_pem_private_key(data, password=password)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise SigningKeyError(f"Unable to load signing key: {exc}") from exc
    if not isinstance(key, rsa.RSAPrivateKey):
        raise SigningKeyError("Signing key must be an RSA private key")
    return key


def _read_text(path_or_value: str, *, label: str) -> str:
    if not path_or_value:
        raise SigningKeyError(f"{label} is not configured")
    if not os.path.isfile(path_or_value):
        return path_or_value.strip()
    try:
        return Path(path_or_value).read_text(encoding="ascii").strip()
    except (OSError, UnicodeDecodeError) as exc:
        raise SigningKeyError(f"Unable to read {label}: {exc}") from exc


class RequestSigner(httpx.Auth):
    requires_request_body = True

    def __init__(self, key_id: str, private_key_pem: str | bytes, passphrase: str | None = None) -> None:
        if not key_id:
            raise SigningKeyError("Signing key id is required")
        self.key_id = key_id
        self._private_key = _load_private_key(private_key_pem, passphrase)

    @classmethod
    def from_resource_principal(cls, settings: Settings) -> "RequestSigner":
        rpst = _read_text(settings.resource_principal_rpst, label="OCI_RESOURCE_PRINCIPAL_RPST")
        pem_path = settings.resource_principal_private_pem
        if not pem_path:
            raise SigningKeyError("OCI_RESOURCE_PRINCIPAL_PRIVATE_PEM is not configured")
        try:
            pem = Path(pem_path).read_bytes()
        except OSError as exc:
            raise SigningKeyError(f"Unable to read private key {pem_path}: {exc}") from exc
        passphrase = settings.resource_principal_private_pem_passphrase or None
        return cls(f"ST${rpst}", pem, passphrase=passphrase)

    def signing_string(self, request: httpx.Request, headers: list[str]) -> str:
        lines = []
        for name in headers:
            if name == "(request-target)":
                target = request.url.raw_path.decode("ascii")
                lines.append(f"(request-target): {request.method.lower()} {target}")
            else:
                lines.append(f"{name}: {request.headers[name]}")
        return "\n".join(lines)

    def sign(self, request: httpx.Request) -> httpx.Request:
        method = request.method.upper()
        if "date" not in request.headers:
            request.headers["date"] = formatdate(usegmt=True)
        if "host" not in request.headers:
            request.headers["host"] = request.url.netloc.decode("ascii")

        if method in BODIED_METHODS:
            body = request.read()
            if "content-type" not in request.headers:
                request.headers["content-type"] = "application/json"
            request.headers["content-length"] = str(len(body))
            request.headers["x-content-sha256"] = body_digest(body)

        headers = headers_to_sign(method)
        message = self.signing_string(request, headers).encode("utf-8")
        signature = self._private_key.sign(message, padding.PKCS1v15(), hashes.SHA256())
        encoded = base64.b64encode(signature).decode("ascii")

        authorization = (
            f'Signature keyId="{self.key_id}",algorithm="{ALGORITHM}",'
            f'headers="{" ".join(headers)}",signature="{encoded}"'
        )
        request.headers["authorization"] = authorization.replace("Signature ", 'Signature version="1",', 1)
        return request

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        yield self.sign(request)
