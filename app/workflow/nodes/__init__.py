from . import acquire_photo, finish, reconcile_existing, resolve_identity, transform, upload

__all__ = [
    "acquire_photo",
    "finish",
    "reconcile_existing",
    "resolve_identity",
    "transform",
    "upload",
]
