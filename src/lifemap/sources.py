"""Priority-ordered list of project-declared metadata sources.

Declarations are processed in the project's order; each resolved source is
moved to the front, replacing any earlier source with the same
``(groupId, artifactId)``. Resolution walks the list front to back and takes
the first match, so later declarations shadow earlier ones and a re-declared
source only contributes its last version.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Union, overload

from lifemap.common.logging_utils import extra_context, is_debug_enabled
from lifemap.errors import AmbiguousStateError, LifecycleMappingConfigurationError, UnresolvedReferenceError
from lifemap.metadata.models import LifecycleMappingMetadataSource, SourceKey, SourceReference

logger = logging.getLogger(__name__)

SourceResolver = Callable[[SourceReference], LifecycleMappingMetadataSource]


class MetadataSourceOverrideList(Sequence[LifecycleMappingMetadataSource]):
    """Ordered map of metadata sources keyed by ``(groupId, artifactId)``.

    Holds at most one source per key. ``prepend`` removes any existing entry
    for the key and inserts the new source at position 0.
    """

    def __init__(self, sources: Iterable[LifecycleMappingMetadataSource] = ()):
        self._sources: "OrderedDict[SourceKey, LifecycleMappingMetadataSource]" = OrderedDict()
        for source in sources:
            self.prepend(source)

    def prepend(self, source: LifecycleMappingMetadataSource) -> None:
        """Insert ``source`` at the front, dropping a previous source with the same key."""
        key = source.key
        replaced = self._sources.pop(key, None)
        self._sources[key] = source
        self._sources.move_to_end(key, last=False)
        if replaced is not None and is_debug_enabled(logger):
            logger.debug(
                "Metadata source overridden",
                extra=extra_context(
                    event="decision",
                    component="sources",
                    action="prepend",
                    outcome="replaced",
                    target=f"{key[0]}:{key[1]}",
                    previous_version=replaced.version,
                    version=source.version,
                )
            )

    def get(self, group_id: str, artifact_id: str) -> Optional[LifecycleMappingMetadataSource]:
        return self._sources.get((group_id, artifact_id))

    def keys(self) -> List[SourceKey]:
        return list(self._sources.keys())

    def __iter__(self) -> Iterator[LifecycleMappingMetadataSource]:
        return iter(self._sources.values())

    def __len__(self) -> int:
        return len(self._sources)

    @overload
    def __getitem__(self, index: int) -> LifecycleMappingMetadataSource: ...

    @overload
    def __getitem__(self, index: slice) -> List[LifecycleMappingMetadataSource]: ...

    def __getitem__(
        self, index: Union[int, slice]
    ) -> Union[LifecycleMappingMetadataSource, List[LifecycleMappingMetadataSource]]:
        return list(self._sources.values())[index]

    def __repr__(self) -> str:
        return f"MetadataSourceOverrideList({[str(s) for s in self]})"


def build_override_list(
    references: Iterable[SourceReference], resolve_source: SourceResolver
) -> MetadataSourceOverrideList:
    """Resolve declared references into a MetadataSourceOverrideList.

    Args:
        references: Source references in the project's declared order
        resolve_source: Fetches and parses one reference

    Returns:
        MetadataSourceOverrideList with the last declaration first.

    Raises:
        LifecycleMappingConfigurationError: a reference cannot be resolved or
            parsed. Broken sources are never skipped.
    """
    result = MetadataSourceOverrideList()
    for reference in references:
        try:
            source = resolve_source(reference)
        except (LifecycleMappingConfigurationError, AmbiguousStateError):
            logger.error("Cannot load lifecycle mapping metadata source %s", reference)
            raise
        except OSError as exc:
            logger.error("Cannot read lifecycle mapping metadata source %s: %s", reference, exc)
            raise UnresolvedReferenceError(
                str(reference), str(exc), UnresolvedReferenceError.REPOSITORY_ERROR
            ) from exc
        result.prepend(source)

    if is_debug_enabled(logger):
        logger.debug(
            "Built metadata source override list",
            extra=extra_context(
                event="function_exit",
                component="sources",
                action="build_override_list",
                count=len(result),
                order=[str(s) for s in result],
            )
        )
    return result
