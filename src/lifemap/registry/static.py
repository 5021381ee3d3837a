"""Static, table-backed capability registry.

Tables can be built in code or loaded from a YAML document::

    lifecycleMappings:
      - id: org.example.war
        name: WAR projects
        packagingType: war
        class: example.mappings:WarLifecycleMapping
        pluginExecutions:
          - pluginExecutionFilter:
              groupId: org.apache.maven.plugins
              artifactId: maven-war-plugin
              goals: [war]
            action: ignore
    configurators:
      - id: org.example.jaxb
        name: JAXB
        class: example.configurators:JaxbConfigurator
        pluginExecutionFilters:
          - groupId: org.jvnet.jaxb2.maven2
            artifactId: maven-jaxb2-plugin
            versionRange: "[0.7,)"
            goals: [generate]

Implementations named in ``class`` are imported lazily on instantiation.
"""

from __future__ import annotations

import importlib
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

import yaml
from jsonschema import Draft7Validator

from lifemap.errors import MalformedMetadataError
from lifemap.metadata.models import ConfigNode, ExecutionFilter, PluginExecutionMetadata
from lifemap.metadata.projection import project_binding, project_filter
from lifemap.registry.base import (
    CapabilityRegistry,
    ConfiguratorEntry,
    Factory,
    LifecycleMappingEntry,
)

logger = logging.getLogger(__name__)

_FILTER_SCHEMA = {
    "type": "object",
    "properties": {
        "groupId": {"type": "string"},
        "artifactId": {"type": "string"},
        "versionRange": {"type": "string"},
        "goals": {"type": "array", "items": {"type": "string"}},
    },
    "additionalProperties": False,
}

_CLASS_SCHEMA = {"type": "string", "pattern": r"^[A-Za-z_][\w.]*:[A-Za-z_][\w.]*$"}

REGISTRY_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "lifecycleMappings": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id"],
                "properties": {
                    "id": {"type": "string", "minLength": 1},
                    "name": {"type": "string"},
                    "packagingType": {"type": "string"},
                    "class": _CLASS_SCHEMA,
                    "pluginExecutions": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "required": ["action"],
                            "properties": {
                                "pluginExecutionFilter": _FILTER_SCHEMA,
                                "action": {"type": ["string", "object"]},
                            },
                            "additionalProperties": False,
                        },
                    },
                },
                "additionalProperties": False,
            },
        },
        "configurators": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id"],
                "properties": {
                    "id": {"type": "string", "minLength": 1},
                    "name": {"type": "string"},
                    "class": _CLASS_SCHEMA,
                    "aliasOf": {"type": "string", "minLength": 1},
                    "pluginExecutionFilters": {"type": "array", "items": _FILTER_SCHEMA},
                },
                "additionalProperties": False,
            },
        },
    },
    "additionalProperties": False,
}


class StaticCapabilityRegistry(CapabilityRegistry):
    """Registry backed by fixed, ordered tables of entries."""

    def __init__(
        self,
        lifecycle_mappings: Iterable[LifecycleMappingEntry] = (),
        configurators: Iterable[ConfiguratorEntry] = (),
    ):
        self._lifecycle_mappings = tuple(lifecycle_mappings)
        self._configurators = tuple(configurators)

    def list_lifecycle_mappings(self) -> Sequence[LifecycleMappingEntry]:
        return self._lifecycle_mappings

    def list_configurators(self) -> Sequence[ConfiguratorEntry]:
        return self._configurators


def import_factory(target: str) -> Factory:
    """Return a factory that imports ``package.module:Attr`` and instantiates it.

    Callables (classes, functions) are called with no arguments; any other
    attribute is returned as is.
    """
    module_name, _, attr_path = target.partition(":")

    def _factory() -> Any:
        obj: Any = importlib.import_module(module_name)
        for part in attr_path.split("."):
            obj = getattr(obj, part)
        return obj() if callable(obj) else obj

    return _factory


def _validate(data: Any, origin: str) -> None:
    validator = Draft7Validator(REGISTRY_SCHEMA)
    errs = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
    if errs:
        first = errs[0]
        path = "/".join([str(p) for p in first.path])
        raise MalformedMetadataError(f"Invalid registry table {origin} at '{path}': {first.message}")


def _binding_from_dict(data: Dict[str, Any]) -> PluginExecutionMetadata:
    action = data.get("action")
    if isinstance(action, str):
        action = {action: None}
    node = ConfigNode.from_dict(
        "pluginExecution",
        {"pluginExecutionFilter": data.get("pluginExecutionFilter") or {}, "action": action},
    )
    return project_binding(node)


def _filter_from_dict(data: Dict[str, Any]) -> ExecutionFilter:
    return project_filter(ConfigNode.from_dict("pluginExecutionFilter", data))


def registry_from_dict(data: Optional[Dict[str, Any]], origin: str = "<memory>") -> StaticCapabilityRegistry:
    """Build a registry from a parsed YAML/JSON table.

    Raises:
        MalformedMetadataError: when the table does not match REGISTRY_SCHEMA.
    """
    data = data or {}
    _validate(data, origin)

    mappings: List[LifecycleMappingEntry] = []
    for item in data.get("lifecycleMappings", []):
        mappings.append(LifecycleMappingEntry(
            id=item["id"],
            name=item.get("name"),
            packaging_type=item.get("packagingType"),
            factory=import_factory(item["class"]) if item.get("class") else None,
            plugin_executions=tuple(_binding_from_dict(pe) for pe in item.get("pluginExecutions", [])),
        ))

    configurators: List[ConfiguratorEntry] = []
    for item in data.get("configurators", []):
        configurators.append(ConfiguratorEntry(
            id=item["id"],
            name=item.get("name"),
            factory=import_factory(item["class"]) if item.get("class") else None,
            filters=tuple(_filter_from_dict(f) for f in item.get("pluginExecutionFilters", [])),
            alias_of=item.get("aliasOf"),
        ))

    logger.debug(
        "Loaded registry %s: %d lifecycle mappings, %d configurators",
        origin, len(mappings), len(configurators),
    )
    return StaticCapabilityRegistry(mappings, configurators)


def load_registry(path: str) -> StaticCapabilityRegistry:
    """Load a registry table from a YAML (or JSON) file.

    Raises:
        OSError: the file cannot be read.
        MalformedMetadataError: the file is not valid YAML or fails validation.
    """
    with open(path, "r", encoding="utf-8") as fh:
        try:
            data = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            raise MalformedMetadataError(f"Cannot parse registry table {path}: {exc}") from exc
    if data is not None and not isinstance(data, dict):
        raise MalformedMetadataError(f"Registry table {path} must be a mapping")
    return registry_from_dict(data, origin=path)
