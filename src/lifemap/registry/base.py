"""Global capability registry interface.

The registry enumerates the lifecycle mappings and project configurators that
are installed on the host and instantiates their implementations by id.
Enumeration order must be deterministic: resolvers take the first match.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, Tuple

from lifemap.errors import NotInstalledError
from lifemap.metadata.models import (
    ExecutionFilter,
    LifecycleMappingMetadata,
    MojoExecutionKey,
    PluginExecutionMetadata,
)

logger = logging.getLogger(__name__)

Factory = Callable[[], Any]


@dataclass(frozen=True)
class LifecycleMappingEntry:
    """A built-in lifecycle mapping."""

    id: str
    name: Optional[str] = None
    packaging_type: Optional[str] = None
    factory: Optional[Factory] = None
    plugin_executions: Tuple[PluginExecutionMetadata, ...] = ()

    @property
    def metadata(self) -> LifecycleMappingMetadata:
        return LifecycleMappingMetadata(
            id=self.id,
            name=self.name,
            packaging_type=self.packaging_type or "",
            plugin_executions=self.plugin_executions,
        )


@dataclass(frozen=True)
class ConfiguratorEntry:
    """A built-in project configurator, optionally pre-bound to execution filters.

    ``alias_of`` redirects a retired id to the configurator that replaced it.
    """

    id: str
    name: Optional[str] = None
    factory: Optional[Factory] = None
    filters: Tuple[ExecutionFilter, ...] = ()
    alias_of: Optional[str] = None

    def is_enabled_for(self, execution: MojoExecutionKey) -> bool:
        """True when any pre-bound filter matches ``execution``."""
        return any(f.match(execution) for f in self.filters)


class CapabilityRegistry(ABC):
    """Enumerates installed lifecycle mappings and configurators."""

    @abstractmethod
    def list_lifecycle_mappings(self) -> Sequence[LifecycleMappingEntry]:
        """Return lifecycle mapping entries in a stable order."""

    @abstractmethod
    def list_configurators(self) -> Sequence[ConfiguratorEntry]:
        """Return configurator entries in a stable order."""

    def instantiate(self, identifier: str, kind: str = NotInstalledError.CONFIGURATOR) -> Any:
        """Create the implementation registered under ``identifier``.

        Args:
            identifier: Mapping or configurator id
            kind: NotInstalledError.CONFIGURATOR or NotInstalledError.LIFECYCLE_MAPPING

        Returns:
            The implementation object, or None for an entry without one.

        Raises:
            NotInstalledError: no such entry, or its implementation cannot be loaded.
        """
        if kind == NotInstalledError.LIFECYCLE_MAPPING:
            entries: Sequence[Any] = self.list_lifecycle_mappings()
        else:
            entries = self.list_configurators()
        for entry in entries:
            if entry.id != identifier:
                continue
            if entry.factory is None:
                return None
            try:
                return entry.factory()
            except NotInstalledError:
                raise
            except Exception as exc:  # pylint: disable=broad-exception-caught
                logger.error("Failed to instantiate %s '%s': %s", kind, identifier, exc)
                raise NotInstalledError(kind, identifier, f"instantiation failed: {exc}") from exc
        raise NotInstalledError(kind, identifier)
