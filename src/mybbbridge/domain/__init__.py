"""Domain layer: errors, constants and schemas."""

from .errors import (
    BridgeError,
    ConfigError,
    DatabaseConnectionError,
    InvalidResponseError,
    NoRowsAffectedError,
    NotFoundError,
    RefreshError,
)
from .schemas import (
    ArtifactKind,
    LoadResult,
    SaveAction,
    SaveResult,
    Stylesheet,
    SyncOutcome,
    Template,
    TemplateGroup,
)

__all__ = [
    "BridgeError",
    "ConfigError",
    "DatabaseConnectionError",
    "InvalidResponseError",
    "NoRowsAffectedError",
    "NotFoundError",
    "RefreshError",
    "ArtifactKind",
    "LoadResult",
    "SaveAction",
    "SaveResult",
    "Stylesheet",
    "SyncOutcome",
    "Template",
    "TemplateGroup",
]
