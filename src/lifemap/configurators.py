"""Resolved configurators and lifecycle mappings.

Configurators are a tagged variant: ``IgnoreConfigurator``,
``ExecuteConfigurator`` and ``DelegateConfigurator`` each carry only the data
their behavior needs. All of them answer ``applies_to(execution)``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Tuple, Union

from lifemap.metadata.models import ExecutionFilter, LifecycleMappingMetadata, MojoExecutionKey


@dataclass(frozen=True)
class IgnoreConfigurator:
    """No-op configurator; ``filter`` records why the execution is ignored."""

    filter: ExecutionFilter
    kind = "ignore"

    @property
    def filters(self) -> Tuple[ExecutionFilter, ...]:
        return (self.filter,)

    def applies_to(self, execution: MojoExecutionKey) -> bool:
        return self.filter.match(execution)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "filters": [self.filter.to_dict()]}


@dataclass(frozen=True)
class ExecuteConfigurator:
    """Runs the matching mojo execution as part of the build."""

    filter: ExecutionFilter
    run_on_incremental: bool = True
    kind = "execute"

    @property
    def filters(self) -> Tuple[ExecutionFilter, ...]:
        return (self.filter,)

    def applies_to(self, execution: MojoExecutionKey) -> bool:
        return self.filter.match(execution)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "runOnIncremental": self.run_on_incremental,
            "filters": [self.filter.to_dict()],
        }


@dataclass(frozen=True)
class DelegateConfigurator:
    """A registry configurator scoped to the filters it was bound with.

    It applies to an execution when any of its filters matches.
    """

    configurator_id: str
    name: Optional[str] = None
    implementation: Any = None
    filters: Tuple[ExecutionFilter, ...] = ()
    kind = "configurator"

    def with_filter(self, execution_filter: ExecutionFilter) -> "DelegateConfigurator":
        """Return a copy bound to one more filter."""
        return replace(self, filters=self.filters + (execution_filter,))

    def applies_to(self, execution: MojoExecutionKey) -> bool:
        return any(f.match(execution) for f in self.filters)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "id": self.configurator_id,
            "name": self.name,
            "implementation": type(self.implementation).__name__ if self.implementation is not None else None,
            "filters": [f.to_dict() for f in self.filters],
        }


Configurator = Union[IgnoreConfigurator, ExecuteConfigurator, DelegateConfigurator]


@dataclass(frozen=True)
class LifecycleMapping:
    """A fully built lifecycle mapping: metadata plus materialized configurators.

    ``implementation`` is the registry implementation for ``metadata.id``, or
    None for a mapping that is purely declarative.
    """

    metadata: LifecycleMappingMetadata
    implementation: Any = None
    configurators: Tuple[Configurator, ...] = ()

    @property
    def id(self) -> str:
        return self.metadata.id

    @property
    def name(self) -> Optional[str]:
        return self.metadata.name

    @property
    def packaging_type(self) -> str:
        return self.metadata.packaging_type

    def configurator_for(self, execution: MojoExecutionKey) -> Optional[Configurator]:
        """First configurator of this mapping that applies to ``execution``."""
        for configurator in self.configurators:
            if configurator.applies_to(execution):
                return configurator
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "packagingType": self.packaging_type,
            "implementation": type(self.implementation).__name__ if self.implementation is not None else None,
            "configurators": [c.to_dict() for c in self.configurators],
        }
