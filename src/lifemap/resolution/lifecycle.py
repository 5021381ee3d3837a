"""Lifecycle mapping resolution by packaging type or id."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from lifemap.common.logging_utils import extra_context, is_debug_enabled
from lifemap.configurators import LifecycleMapping
from lifemap.errors import LifecycleMappingConfigurationError, NotInstalledError
from lifemap.metadata.models import (
    LifecycleMappingMetadata,
    LifecycleMappingMetadataSource,
    PluginExecutionMetadata,
)
from lifemap.registry.base import CapabilityRegistry, LifecycleMappingEntry
from lifemap.registry.lookup import RegistryView
from lifemap.resolution.configurator import ProjectConfiguratorResolver

logger = logging.getLogger(__name__)


class LifecycleMappingResolver:
    """Finds and builds the lifecycle mapping that governs a packaging type.

    Project metadata sources shadow the registry: sources are walked in
    override-list order, mappings within a source in declared order, and the
    first mapping for the packaging type wins. The registry is the fallback.
    """

    def __init__(
        self,
        registry: CapabilityRegistry,
        configurator_resolver: Optional[ProjectConfiguratorResolver] = None,
    ):
        self._registry = registry
        self._configurators = configurator_resolver or ProjectConfiguratorResolver(registry)

    def resolve_by_packaging(
        self,
        sources: Iterable[LifecycleMappingMetadataSource],
        packaging_type: str,
    ) -> Optional[LifecycleMappingMetadata]:
        """Return the mapping metadata for ``packaging_type`` or None.

        None is a legitimate outcome: no managed lifecycle for this packaging.
        """
        found = self._find(sources, packaging_type, RegistryView(self._registry))
        return found[0] if found else None

    def resolve_by_id(self, mapping_id: str) -> Optional[LifecycleMapping]:
        """Build the registry lifecycle mapping ``mapping_id``, or None if not registered.

        Every binding of the mapping is materialized; delegate bindings are
        resolved against the registry before the mapping is returned.
        """
        view = RegistryView(self._registry)
        entry = view.mapping_by_id(mapping_id)
        if entry is None:
            return None
        return self._build(entry.metadata, entry, view, from_registry=True)

    def get_lifecycle_mapping(
        self,
        sources: Iterable[LifecycleMappingMetadataSource],
        packaging_type: str,
    ) -> Optional[LifecycleMapping]:
        """Resolve and build the lifecycle mapping for ``packaging_type``.

        A project-declared mapping keeps its own bindings first; when its id is
        also registered, the registry implementation is used and the registry
        entry's bindings follow the project's.
        """
        view = RegistryView(self._registry)
        found = self._find(sources, packaging_type, view)
        if found is None:
            logger.info("No lifecycle mapping for packaging type '%s'", packaging_type)
            return None
        metadata, from_registry = found
        entry = view.mapping_by_id(metadata.id)
        return self._build(metadata, entry, view, from_registry)

    def _find(
        self,
        sources: Iterable[LifecycleMappingMetadataSource],
        packaging_type: str,
        view: RegistryView,
    ) -> Optional[Tuple[LifecycleMappingMetadata, bool]]:
        """Mapping descriptor for ``packaging_type`` and whether it came from the registry."""
        for source in sources:
            for mapping in source.lifecycle_mappings:
                if mapping.packaging_type == packaging_type:
                    if is_debug_enabled(logger):
                        logger.debug(
                            "Project lifecycle mapping matched",
                            extra=extra_context(
                                event="decision",
                                component="lifecycle_resolver",
                                action="resolve_by_packaging",
                                outcome="project_match",
                                target=packaging_type,
                                source=str(source),
                                mapping=mapping.id,
                            )
                        )
                    return mapping, False
        entry = view.mapping_by_packaging(packaging_type)
        if entry is None:
            return None
        return entry.metadata, True

    def _build(
        self,
        metadata: LifecycleMappingMetadata,
        entry: Optional[LifecycleMappingEntry],
        view: RegistryView,
        from_registry: bool,
    ) -> LifecycleMapping:
        implementation = None
        if entry is not None:
            implementation = view.instantiate(entry.id, NotInstalledError.LIFECYCLE_MAPPING)

        bindings: List[PluginExecutionMetadata] = list(metadata.plugin_executions)
        if entry is not None and not from_registry:
            bindings.extend(entry.plugin_executions)

        configurators = []
        for binding in bindings:
            try:
                configurators.append(self._configurators.create_configurator(binding, view))
            except LifecycleMappingConfigurationError as exc:
                logger.error("Lifecycle mapping '%s' cannot be built: %s", metadata.id, exc)
                raise

        return LifecycleMapping(
            metadata=metadata,
            implementation=implementation,
            configurators=tuple(configurators),
        )
