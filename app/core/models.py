from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import HireFailureReason, HireStatus, PhotoEncoding, PhotoSource, SyncStatus


class SyncRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    bucket: str = Field(min_length=1)
    namespace: str = Field(min_length=1)
    object: str = Field(min_length=1)
    hostname: str = Field(min_length=1)
    compartment_ocid: str = Field(min_length=1, alias="compartmentOcid")
    secret_ocid: str = Field(min_length=1, alias="secretOcid")
    hcm_hostname: str = Field(min_length=1, alias="hcmhostname")


class Checkpoint(BaseModel):
    model_config = ConfigDict(extra="allow")

    lastfeedtime: str = Field(min_length=1)


class NewHire(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True, coerce_numbers_to_str=True)

    person_number: str = Field(alias="PersonNumber", min_length=1)


class PhotoAsset(BaseModel):
    data: bytes
    encoding: PhotoEncoding
    source: PhotoSource
    object_name: str


class WorkerIdentity(BaseModel):
    internal_id: str


class ExistingPhotoRef(BaseModel):
    photo_id: str | None = None


class HireOutcome(BaseModel):
    person_number: str
    status: HireStatus
    reason: HireFailureReason | None = None
    message: str | None = None
    photo_source: PhotoSource | None = None
    replaced_photo_id: str | None = None


class SyncSummary(BaseModel):
    run_id: str
    status: SyncStatus
    previous_watermark: str
    watermark: str
    total: int = 0
    succeeded: list[str] = Field(default_factory=list)
    failed: list[HireOutcome] = Field(default_factory=list)


class SyncErrorDetail(BaseModel):
    kind: str
    message: str


class SyncResult(BaseModel):
    ok: bool
    summary: SyncSummary | None = None
    error: SyncErrorDetail | None = None

    @classmethod
    def success(cls, summary: SyncSummary) -> "SyncResult":
        return cls(ok=True, summary=summary)

    @classmethod
    def failure(cls, kind: str, message: str) -> "SyncResult":
        return cls(ok=False, error=SyncErrorDetail(kind=kind, message=message))

    def describe(self) -> str:
        if not self.ok and self.error:
            return f"{self.error.kind}: {self.error.message}"
        summary = self.summary
        if summary is None:
            return "Completed"
        if summary.status == SyncStatus.NOTHING_TO_DO:
            return "No new hires to process."
        return f"Completed: {len(summary.succeeded)} succeeded, {len(summary.failed)} failed"


def dump_failures(failures: list[HireOutcome]) -> list[dict[str, Any]]:
    return [item.model_dump(mode="json", exclude_none=True) for item in failures]
