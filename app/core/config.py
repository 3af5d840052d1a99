from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.enums import PhotoEncoding


class Settings(BaseSettings):
    app_name: str = "HCM Photo Sync"
    environment: str = "dev"
    debug: bool = True

    api_host: str = "0.0.0.0"
    api_port: int = 8000
    local_api_key: str = "change-me"

    redis_url: str = "redis://redis:6379/0"
    sync_interval_minutes: int = 15

    # Coordinates used by scheduled runs; API and CLI runs pass their own.
    sync_namespace: str = ""
    sync_bucket: str = ""
    sync_object: str = "config.json"
    vault_hostname: str = ""
    compartment_ocid: str = ""
    secret_ocid: str = ""
    hcm_hostname: str = ""

    hcm_api_version: str = "11.13.18.05"
    hcm_feed_path: str = "/hcmRestApi/atomservlet/employee/newhire"
    http_timeout_seconds: float = 60.0

    default_photo_object: str = "defaultPhoto"
    photo_encoding: PhotoEncoding = PhotoEncoding.BASE64
    photo_transform: str = "overlay"
    overlay_text: str = "COMPANY LOGO"
    overlay_x: int = 25
    overlay_y: int = 175
    overlay_font_size: int = 32

    blob_store_backend: str = "local"
    blob_store_root: Path = Path("/data/blobs")
    object_storage_host: str = ""
    dead_letter_prefix: str = "failed-hires/"

    resource_principal_rpst: str = Field(
        default="",
        validation_alias=AliasChoices("OCI_RESOURCE_PRINCIPAL_RPST", "resource_principal_rpst"),
    )
    resource_principal_private_pem: str = Field(
        default="",
        validation_alias=AliasChoices("OCI_RESOURCE_PRINCIPAL_PRIVATE_PEM", "resource_principal_private_pem"),
    )
    resource_principal_private_pem_passphrase: str = Field(
        default="",
        validation_alias=AliasChoices(
            "OCI_RESOURCE_PRINCIPAL_PRIVATE_PEM_PASSPHRASE",
            "resource_principal_private_pem_passphrase",
        ),
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
