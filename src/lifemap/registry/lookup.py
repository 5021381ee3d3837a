"""Per-call view over a capability registry.

A RegistryView enumerates the registry once and instantiates each
implementation at most once for the lifetime of the view. Resolvers create a
fresh view per resolution call, so nothing is shared between calls.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from lifemap.common.logging_utils import extra_context, is_debug_enabled
from lifemap.errors import MalformedMetadataError, NotInstalledError
from lifemap.metadata.models import MojoExecutionKey
from lifemap.registry.base import CapabilityRegistry, ConfiguratorEntry, LifecycleMappingEntry

logger = logging.getLogger(__name__)


class RegistryView:
    """Lookups and memoized instantiation against a CapabilityRegistry."""

    def __init__(self, registry: CapabilityRegistry):
        self._registry = registry
        self._mappings: Optional[Sequence[LifecycleMappingEntry]] = None
        self._configurators: Optional[Sequence[ConfiguratorEntry]] = None
        self._instances: Dict[Tuple[str, str], Any] = {}

    @property
    def lifecycle_mappings(self) -> Sequence[LifecycleMappingEntry]:
        if self._mappings is None:
            self._mappings = tuple(self._registry.list_lifecycle_mappings())
        return self._mappings

    @property
    def configurators(self) -> Sequence[ConfiguratorEntry]:
        if self._configurators is None:
            self._configurators = tuple(self._registry.list_configurators())
        return self._configurators

    def mapping_by_packaging(self, packaging_type: str) -> Optional[LifecycleMappingEntry]:
        """First lifecycle mapping registered for ``packaging_type``."""
        for entry in self.lifecycle_mappings:
            if entry.packaging_type == packaging_type:
                return entry
        return None

    def mapping_by_id(self, mapping_id: str) -> Optional[LifecycleMappingEntry]:
        for entry in self.lifecycle_mappings:
            if entry.id == mapping_id:
                return entry
        return None

    def configurator_by_id(self, configurator_id: str) -> Optional[ConfiguratorEntry]:
        for entry in self.configurators:
            if entry.id == configurator_id:
                return entry
        return None

    def resolve_configurator(self, configurator_id: str) -> ConfiguratorEntry:
        """Return the entry for ``configurator_id``, following ``alias_of`` redirects.

        Raises:
            NotInstalledError: the id (or an alias target) is not registered.
            MalformedMetadataError: the alias chain refers back to itself.
        """
        chain: List[str] = []
        current = configurator_id
        while True:
            if current in chain:
                cycle = " -> ".join(chain + [current])
                raise MalformedMetadataError(f"Configurator alias cycle detected: {cycle}")
            chain.append(current)
            entry = self.configurator_by_id(current)
            if entry is None:
                detail = None if current == configurator_id else f"alias of '{configurator_id}'"
                raise NotInstalledError(NotInstalledError.CONFIGURATOR, current, detail)
            if not entry.alias_of:
                return entry
            current = entry.alias_of

    def configurators_for(self, execution: MojoExecutionKey) -> Iterator[ConfiguratorEntry]:
        """Yield registry configurators whose pre-bound filters select ``execution``."""
        for entry in self.configurators:
            if entry.is_enabled_for(execution):
                yield entry

    def instantiate(self, identifier: str, kind: str = NotInstalledError.CONFIGURATOR) -> Any:
        """Instantiate ``identifier`` once per view."""
        key = (kind, identifier)
        if key not in self._instances:
            if is_debug_enabled(logger):
                logger.debug(
                    "Instantiating registry implementation",
                    extra=extra_context(
                        event="instantiate",
                        component="registry",
                        action="instantiate",
                        target=identifier,
                        kind=kind,
                    )
                )
            self._instances[key] = self._registry.instantiate(identifier, kind)
        return self._instances[key]

