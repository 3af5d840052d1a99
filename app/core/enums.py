from enum import Enum


class WorkflowStep(str, Enum):
    ACQUIRE_PHOTO = "acquire_photo"
    TRANSFORM = "transform"
    RESOLVE_IDENTITY = "resolve_identity"
    RECONCILE_EXISTING = "reconcile_existing"
    UPLOAD = "upload"
    DONE = "done"
    FAILED = "failed"


class HireFailureReason(str, Enum):
    PHOTO_UNAVAILABLE = "PhotoUnavailable"
    TRANSFORM_FAILED = "TransformFailed"
    IDENTITY_RESOLUTION_FAILED = "IdentityResolutionFailed"
    RECONCILIATION_FAILED = "ReconciliationFailed"
    UPLOAD_FAILED = "UploadFailed"


# The failure a step reports when it cannot complete.
STEP_FAILURES = {
    WorkflowStep.ACQUIRE_PHOTO: HireFailureReason.PHOTO_UNAVAILABLE,
    WorkflowStep.TRANSFORM: HireFailureReason.TRANSFORM_FAILED,
    WorkflowStep.RESOLVE_IDENTITY: HireFailureReason.IDENTITY_RESOLUTION_FAILED,
    WorkflowStep.RECONCILE_EXISTING: HireFailureReason.RECONCILIATION_FAILED,
    WorkflowStep.UPLOAD: HireFailureReason.UPLOAD_FAILED,
}


class HireStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class SyncStatus(str, Enum):
    COMPLETED = "completed"
    NOTHING_TO_DO = "nothing_to_do"


class PhotoEncoding(str, Enum):
    BASE64 = "base64"
    BINARY = "binary"


class PhotoSource(str, Enum):
    HIRE = "hire"
    DEFAULT = "default"
