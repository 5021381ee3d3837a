"""Data models for lifecycle mapping metadata.

All types are immutable value objects. They are built from parsed documents
or registry tables during a resolution call and carry no shared state.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from lifemap.constants import Constants
from lifemap.errors import MalformedMetadataError
from lifemap.versioning.ranges import InvalidVersionRange, VersionRange, parse_version_range


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class ConfigNode:
    """Untyped configuration tree: an element with optional text and ordered children."""

    name: str
    value: Optional[str] = None
    attributes: Tuple[Tuple[str, str], ...] = ()
    children: Tuple["ConfigNode", ...] = ()

    def get_child(self, name: str) -> Optional["ConfigNode"]:
        """Return the first child called ``name`` or None."""
        for child in self.children:
            if child.name == name:
                return child
        return None

    def get_children(self, name: str) -> List["ConfigNode"]:
        """Return every child called ``name`` in document order."""
        return [child for child in self.children if child.name == name]

    def child_value(self, name: str) -> Optional[str]:
        """Return the stripped text of child ``name``; blank text counts as absent."""
        child = self.get_child(name)
        if child is None:
            return None
        return _blank_to_none(child.value)

    def attribute(self, name: str) -> Optional[str]:
        for key, value in self.attributes:
            if key == name:
                return value
        return None

    @classmethod
    def from_dict(cls, name: str, data: Any) -> "ConfigNode":
        """Build a tree from YAML/JSON style data.

        Mappings become children, list items become repeated children named
        after the singular of their key (``goals: [a, b]`` gives
        ``<goals><goal>a</goal><goal>b</goal></goals>``) and scalars become text.
        """
        if data is None:
            return cls(name=name)
        if isinstance(data, dict):
            children = tuple(cls.from_dict(str(key), value) for key, value in data.items())
            return cls(name=name, children=children)
        if isinstance(data, (list, tuple)):
            item_name = name[:-1] if name.endswith("s") and len(name) > 1 else name
            return cls(name=name, children=tuple(cls.from_dict(item_name, item) for item in data))
        if isinstance(data, bool):
            return cls(name=name, value="true" if data else "false")
        return cls(name=name, value=str(data))

    def to_dict(self) -> Any:
        """Inverse of ``from_dict`` for display purposes."""
        if not self.children:
            return self.value
        names = [child.name for child in self.children]
        if len(set(names)) == 1 and len(names) > 1:
            return [child.to_dict() for child in self.children]
        return {child.name: child.to_dict() for child in self.children}


EMPTY_CONFIGURATION = ConfigNode(name="configuration")


@dataclass(frozen=True)
class MojoExecutionKey:
    """One concrete build-plugin goal invocation."""

    group_id: str
    artifact_id: str
    version: str
    goal: str
    execution_id: Optional[str] = None
    lifecycle_phase: Optional[str] = None

    @classmethod
    def parse(cls, token: str) -> "MojoExecutionKey":
        """Parse ``groupId:artifactId:version:goal``."""
        parts = [p.strip() for p in token.strip().split(":")]
        if len(parts) != 4 or not all(parts):
            raise ValueError(f"Expected groupId:artifactId:version:goal, got '{token}'")
        return cls(group_id=parts[0], artifact_id=parts[1], version=parts[2], goal=parts[3])

    def __str__(self) -> str:
        text = f"{self.group_id}:{self.artifact_id}:{self.version}:{self.goal}"
        if self.execution_id:
            text = f"{text} ({self.execution_id})"
        return text


@dataclass(frozen=True)
class ExecutionFilter:
    """Declarative selector for mojo executions.

    Absent fields are "don't care". ``version_range`` is validated on
    construction so that matching never has to fail.
    """

    group_id: Optional[str] = None
    artifact_id: Optional[str] = None
    version_range: Optional[str] = None
    goals: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "group_id", _blank_to_none(self.group_id))
        object.__setattr__(self, "artifact_id", _blank_to_none(self.artifact_id))
        object.__setattr__(self, "version_range", _blank_to_none(self.version_range))
        raw_goals = (self.goals,) if isinstance(self.goals, str) else (self.goals or ())
        goals = frozenset(g.strip() for g in raw_goals if g and g.strip())
        object.__setattr__(self, "goals", goals)
        if self.version_range is not None:
            try:
                parse_version_range(self.version_range)
            except InvalidVersionRange as exc:
                raise MalformedMetadataError(
                    f"Invalid versionRange '{self.version_range}' in plugin execution filter: {exc}"
                ) from exc

    @property
    def parsed_range(self) -> Optional[VersionRange]:
        if self.version_range is None:
            return None
        return parse_version_range(self.version_range)

    def match(self, execution: MojoExecutionKey) -> bool:
        """Return True when ``execution`` is selected by this filter."""
        from lifemap.metadata.matcher import matches  # pylint: disable=import-outside-toplevel
        return matches(self, execution)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "groupId": self.group_id,
            "artifactId": self.artifact_id,
            "versionRange": self.version_range,
            "goals": sorted(self.goals),
        }

    def __str__(self) -> str:
        goals = ",".join(sorted(self.goals)) or "*"
        return (
            f"{self.group_id or '*'}:{self.artifact_id or '*'}:"
            f"{self.version_range or '*'}:{goals}"
        )


class PluginExecutionAction(Enum):
    """What to do with a matching execution. Values are the XML action tags."""

    EXECUTE = "execute"
    IGNORE = "ignore"
    DELEGATE = "configurator"


@dataclass(frozen=True)
class PluginExecutionMetadata:
    """A configurator binding: when an execution matches ``filter``, do ``action``.

    ``configurator_id`` is only set for DELEGATE bindings.
    """

    filter: ExecutionFilter
    action: Optional[PluginExecutionAction]
    configuration: ConfigNode = EMPTY_CONFIGURATION
    configurator_id: Optional[str] = None

    @property
    def run_on_incremental(self) -> bool:
        """``runOnIncremental`` from the configuration tree; defaults to True."""
        child = self.configuration.get_child(Constants.ELEMENT_RUN_ON_INCREMENTAL)
        if child is None:
            return True
        return (child.value or "").strip().lower() == "true"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filter": self.filter.to_dict(),
            "action": self.action.name.lower() if self.action else None,
            "configuratorId": self.configurator_id,
            "configuration": self.configuration.to_dict(),
        }


@dataclass(frozen=True)
class LifecycleMappingMetadata:
    """Describes which lifecycle mapping governs a packaging type."""

    id: str
    name: Optional[str]
    packaging_type: str
    plugin_executions: Tuple[PluginExecutionMetadata, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "packagingType": self.packaging_type,
            "pluginExecutions": [pe.to_dict() for pe in self.plugin_executions],
        }


# Identity key of a metadata source for override purposes.
SourceKey = Tuple[str, str]


@dataclass(frozen=True)
class SourceReference:
    """A project's declaration of a metadata source to use."""

    group_id: str
    artifact_id: str
    version: str

    @property
    def key(self) -> SourceKey:
        return (self.group_id, self.artifact_id)

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"


@dataclass(frozen=True)
class LifecycleMappingMetadataSource:
    """A versioned bundle of lifecycle mappings and plugin execution bindings."""

    group_id: Optional[str] = None
    artifact_id: Optional[str] = None
    version: Optional[str] = None
    lifecycle_mappings: Tuple[LifecycleMappingMetadata, ...] = ()
    plugin_executions: Tuple[PluginExecutionMetadata, ...] = ()

    @property
    def key(self) -> SourceKey:
        return (self.group_id or "", self.artifact_id or "")

    def with_coordinates(self, reference: SourceReference) -> "LifecycleMappingMetadataSource":
        """Return a copy stamped with the coordinates it was resolved for."""
        return replace(
            self,
            group_id=reference.group_id,
            artifact_id=reference.artifact_id,
            version=reference.version,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "groupId": self.group_id,
            "artifactId": self.artifact_id,
            "version": self.version,
            "lifecycleMappings": [m.to_dict() for m in self.lifecycle_mappings],
            "pluginExecutions": [pe.to_dict() for pe in self.plugin_executions],
        }

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"
