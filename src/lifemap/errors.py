"""Error taxonomy for lifecycle mapping resolution.

Every error raised to callers of the resolution entry points embeds the
offending identifier (coordinates, mapping id or configurator id). "No match"
is never an error: resolvers return ``None`` for it.
"""

from __future__ import annotations

from typing import Optional


class LifecycleMappingConfigurationError(Exception):
    """Base class for configuration problems found while resolving metadata."""


class MalformedMetadataError(LifecycleMappingConfigurationError):
    """Raised when a declaration is structurally invalid (missing id, blank configurator id)."""


class MalformedDocumentError(MalformedMetadataError):
    """Raised when a metadata document cannot be parsed at all."""

    def __init__(self, reason: str, source: Optional[str] = None):
        self.reason = reason
        self.source = source
        if source:
            super().__init__(f"Cannot parse lifecycle mapping metadata for {source}: {reason}")
        else:
            super().__init__(f"Cannot parse lifecycle mapping metadata: {reason}")


class UnresolvedReferenceError(LifecycleMappingConfigurationError):
    """Raised when a referenced metadata source artifact cannot be fetched or read.

    ``kind`` is ``"not_found"`` when no repository has the artifact and
    ``"repository_error"`` when a repository could not be queried.
    """

    NOT_FOUND = "not_found"
    REPOSITORY_ERROR = "repository_error"

    def __init__(self, reference: str, reason: str, kind: str = NOT_FOUND):
        self.reference = reference
        self.reason = reason
        self.kind = kind
        super().__init__(f"Cannot resolve lifecycle mapping metadata {reference}: {reason}")


class NotInstalledError(LifecycleMappingConfigurationError):
    """Raised when a well-formed mapping or configurator id is absent from the registry."""

    CONFIGURATOR = "configurator"
    LIFECYCLE_MAPPING = "lifecycle mapping"

    def __init__(self, kind: str, identifier: str, detail: Optional[str] = None):
        self.kind = kind
        self.identifier = identifier
        self.detail = detail
        if kind == self.CONFIGURATOR:
            message = (
                f"Project configurator '{identifier}' is not available. To enable full "
                "functionality, install the project configurator and update the project configuration."
            )
        else:
            message = (
                f"Lifecycle mapping '{identifier}' is not available. Install the lifecycle "
                "mapping or remove the reference to it."
            )
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class AmbiguousStateError(RuntimeError):
    """Raised when a binding asserts an action that is not recognized.

    This is an internal invariant violation and is not meant to be recovered from.
    """
