class SyncError(Exception):
    """Base class for errors that abort a whole sync run."""

    kind = "SyncError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigInvalid(SyncError):
    kind = "ConfigInvalid"


class SigningKeyError(SyncError):
    kind = "SigningKeyError"


class SecretFetchFailed(SyncError):
    kind = "SecretFetchFailed"


class FeedFetchFailed(SyncError):
    kind = "FeedFetchFailed"


class FeedParseFailed(SyncError):
    kind = "FeedParseFailed"


class CheckpointFailed(SyncError):
    kind = "CheckpointFailed"


class BlobStoreError(Exception):
    pass


class HcmApiError(Exception):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PhotoTransformError(Exception):
    pass
