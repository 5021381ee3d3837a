"""Builders and stubs shared by lifemap tests."""

from lifemap.metadata.models import (
    ExecutionFilter,
    LifecycleMappingMetadata,
    LifecycleMappingMetadataSource,
    MojoExecutionKey,
    PluginExecutionAction,
    PluginExecutionMetadata,
)
from lifemap.registry.base import CapabilityRegistry


class RecordingRegistry(CapabilityRegistry):
    """Registry stub that records every call made against it."""

    def __init__(self, lifecycle_mappings=(), configurators=()):
        self.mappings = list(lifecycle_mappings)
        self.entries = list(configurators)
        self.calls = []

    def list_lifecycle_mappings(self):
        self.calls.append(("list_lifecycle_mappings",))
        return self.mappings

    def list_configurators(self):
        self.calls.append(("list_configurators",))
        return self.entries

    def instantiate(self, identifier, kind="configurator"):
        self.calls.append(("instantiate", identifier, kind))
        return super().instantiate(identifier, kind)


def execution(group_id="org.example", artifact_id="plugin", version="1.0", goal="compile"):
    return MojoExecutionKey(group_id=group_id, artifact_id=artifact_id, version=version, goal=goal)


def binding(action, configurator_id=None, **filter_fields):
    return PluginExecutionMetadata(
        filter=ExecutionFilter(**filter_fields),
        action=action,
        configurator_id=configurator_id,
    )


def source(group_id, artifact_id, version="1.0", mappings=(), executions=()):
    return LifecycleMappingMetadataSource(
        group_id=group_id,
        artifact_id=artifact_id,
        version=version,
        lifecycle_mappings=tuple(mappings),
        plugin_executions=tuple(executions),
    )


def mapping(mapping_id, packaging_type, executions=()):
    return LifecycleMappingMetadata(
        id=mapping_id, name=None, packaging_type=packaging_type, plugin_executions=tuple(executions)
    )


IGNORE = PluginExecutionAction.IGNORE
EXECUTE = PluginExecutionAction.EXECUTE
DELEGATE = PluginExecutionAction.DELEGATE
