"""Loading metadata sources from artifact repositories.

``MetadataSourceLoader.load`` is the source resolver used to build the
override list: resolve the ``lifecycle-mapping-metadata`` classified XML
artifact, read it, parse it and stamp it with the declared coordinates.
"""
from __future__ import annotations

import logging
import threading
from typing import Dict, Optional, Sequence

from lifemap.artifacts import ArtifactResolver
from lifemap.common.logging_utils import Timer, extra_context, is_debug_enabled
from lifemap.constants import Constants
from lifemap.errors import (
    AmbiguousStateError,
    MalformedDocumentError,
    MalformedMetadataError,
    UnresolvedReferenceError,
)
from lifemap.metadata.models import LifecycleMappingMetadataSource, SourceReference
from lifemap.metadata.parser import parse_source

logger = logging.getLogger(__name__)


class MetadataSourceLoader:
    """Resolves and parses lifecycle mapping metadata sources.

    Parsed sources are immutable, so the optional cache may be shared by
    concurrent resolution calls; it is guarded by a lock.
    """

    def __init__(
        self,
        resolver: ArtifactResolver,
        repositories: Optional[Sequence[str]] = None,
        cache: bool = True,
    ):
        self._resolver = resolver
        self._repositories = list(repositories) if repositories else None
        self._cache_enabled = cache
        self._cache: Dict[SourceReference, LifecycleMappingMetadataSource] = {}
        self._cache_lock = threading.Lock()

    def __call__(self, reference: SourceReference) -> LifecycleMappingMetadataSource:
        return self.load(reference)

    def load(self, reference: SourceReference) -> LifecycleMappingMetadataSource:
        """Load the metadata source declared by ``reference``.

        Raises:
            UnresolvedReferenceError: the artifact cannot be fetched or read.
            MalformedMetadataError: the document is malformed.
            AmbiguousStateError: a binding names an unknown action.
        """
        if self._cache_enabled:
            with self._cache_lock:
                cached = self._cache.get(reference)
            if cached is not None:
                return cached

        with Timer() as timer:
            path = self._resolver.resolve(
                reference.group_id,
                reference.artifact_id,
                reference.version,
                Constants.LIFECYCLE_MAPPING_METADATA_TYPE,
                Constants.LIFECYCLE_MAPPING_METADATA_CLASSIFIER,
                self._repositories,
            )
            try:
                with open(path, "rb") as fh:
                    data = fh.read()
            except OSError as exc:
                raise UnresolvedReferenceError(
                    str(reference), f"cannot read {path}: {exc}", UnresolvedReferenceError.REPOSITORY_ERROR
                ) from exc

            try:
                source = parse_source(data, reference)
            except MalformedDocumentError as exc:
                raise MalformedDocumentError(exc.reason, f"{reference} ({path})") from exc
            except MalformedMetadataError as exc:
                raise MalformedMetadataError(f"{exc} in {reference} ({path})") from exc
            except AmbiguousStateError as exc:
                raise AmbiguousStateError(f"{exc} in {reference} ({path})") from exc

        if is_debug_enabled(logger):
            logger.debug(
                "Loaded metadata source",
                extra=extra_context(
                    event="function_exit",
                    component="loader",
                    action="load",
                    target=str(reference),
                    duration_ms=timer.duration_ms(),
                )
            )

        if self._cache_enabled:
            with self._cache_lock:
                self._cache[reference] = source
        return source
