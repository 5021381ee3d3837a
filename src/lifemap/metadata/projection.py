"""Structural projections from configuration trees into the metadata model.

The element names follow the lifecycle mapping metadata document format::

    <lifecycleMappingMetadata>
      <lifecycleMappings>
        <lifecycleMapping>
          <packagingType>war</packagingType>
          <id>org.example.war</id>
          <pluginExecutions>...</pluginExecutions>
        </lifecycleMapping>
      </lifecycleMappings>
      <pluginExecutions>
        <pluginExecution>
          <pluginExecutionFilter>
            <groupId>..</groupId><artifactId>..</artifactId>
            <versionRange>[1.0,)</versionRange>
            <goals><goal>compile</goal></goals>
          </pluginExecutionFilter>
          <action><execute/></action>
        </pluginExecution>
      </pluginExecutions>
    </lifecycleMappingMetadata>
"""

from __future__ import annotations

import logging
from typing import List, Optional

from lifemap.constants import Constants
from lifemap.errors import AmbiguousStateError, MalformedMetadataError
from lifemap.metadata.models import (
    EMPTY_CONFIGURATION,
    ConfigNode,
    ExecutionFilter,
    LifecycleMappingMetadata,
    LifecycleMappingMetadataSource,
    PluginExecutionAction,
    PluginExecutionMetadata,
    SourceReference,
)
from lifemap.common.logging_utils import extra_context, is_debug_enabled

logger = logging.getLogger(__name__)

ELEMENT_PLUGIN_EXECUTIONS = "pluginExecutions"
ELEMENT_PLUGIN_EXECUTION = "pluginExecution"
ELEMENT_PLUGIN_EXECUTION_FILTER = "pluginExecutionFilter"
ELEMENT_LIFECYCLE_MAPPINGS = "lifecycleMappings"
ELEMENT_LIFECYCLE_MAPPING = "lifecycleMapping"
ELEMENT_ACTION = "action"

_ACTIONS = {action.value: action for action in PluginExecutionAction}


def _nested(node: ConfigNode, container: str, item: str) -> List[ConfigNode]:
    holder = node.get_child(container)
    if holder is None:
        return []
    return holder.get_children(item)


def project_filter(node: Optional[ConfigNode]) -> ExecutionFilter:
    """Project a ``pluginExecutionFilter`` element into an ExecutionFilter.

    A missing element yields the catch-all filter.
    """
    if node is None:
        return ExecutionFilter()
    goals = [g.value for g in _nested(node, "goals", "goal") if g.value]
    return ExecutionFilter(
        group_id=node.child_value("groupId"),
        artifact_id=node.child_value("artifactId"),
        version_range=node.child_value("versionRange"),
        goals=frozenset(goals),
    )


def project_binding(node: ConfigNode) -> PluginExecutionMetadata:
    """Project a ``pluginExecution`` element into a PluginExecutionMetadata.

    Raises:
        MalformedMetadataError: no action, more than one action, or a
            configurator action without a non-blank ``id``.
        AmbiguousStateError: the action element is not a known action.
    """
    execution_filter = project_filter(node.get_child(ELEMENT_PLUGIN_EXECUTION_FILTER))

    action_node = node.get_child(ELEMENT_ACTION)
    if action_node is None or not action_node.children:
        raise MalformedMetadataError(
            f"Plugin execution for filter {execution_filter} must specify an action"
        )
    if len(action_node.children) > 1:
        names = ", ".join(child.name for child in action_node.children)
        raise MalformedMetadataError(
            f"Plugin execution for filter {execution_filter} specifies more than one action: {names}"
        )

    action_element = action_node.children[0]
    action = _ACTIONS.get(action_element.name)
    if action is None:
        raise AmbiguousStateError(
            f"Unrecognized plugin execution action '{action_element.name}' for filter {execution_filter}"
        )

    configuration = action_element if action_element.children else EMPTY_CONFIGURATION
    configurator_id = None
    if action is PluginExecutionAction.DELEGATE:
        configurator_id = action_element.child_value(Constants.ELEMENT_CONFIGURATOR_ID)
        if configurator_id is None:
            raise MalformedMetadataError(
                f"A configurator id must be specified (missing <{Constants.ELEMENT_CONFIGURATOR_ID}> "
                f"in configurator action for filter {execution_filter})"
            )

    return PluginExecutionMetadata(
        filter=execution_filter,
        action=action,
        configuration=configuration,
        configurator_id=configurator_id,
    )


def project_bindings(node: ConfigNode) -> List[PluginExecutionMetadata]:
    """Project every ``pluginExecutions/pluginExecution`` child of ``node``."""
    return [project_binding(child) for child in _nested(node, ELEMENT_PLUGIN_EXECUTIONS, ELEMENT_PLUGIN_EXECUTION)]


def project_mapping(node: ConfigNode) -> LifecycleMappingMetadata:
    """Project a ``lifecycleMapping`` element into a LifecycleMappingMetadata."""
    mapping_id = node.child_value("id") or node.child_value("lifecycleMappingId")
    packaging_type = node.child_value("packagingType")
    if mapping_id is None:
        raise MalformedMetadataError(
            f"Lifecycle mapping for packaging type '{packaging_type}' must specify an id"
        )
    if packaging_type is None:
        raise MalformedMetadataError(f"Lifecycle mapping '{mapping_id}' must specify a packagingType")
    return LifecycleMappingMetadata(
        id=mapping_id,
        name=node.child_value("name"),
        packaging_type=packaging_type,
        plugin_executions=tuple(project_bindings(node)),
    )


def project_source(
    node: ConfigNode, reference: Optional[SourceReference] = None
) -> LifecycleMappingMetadataSource:
    """Project a ``lifecycleMappingMetadata`` document root.

    Args:
        node: Document root
        reference: Coordinates the document was resolved for, if any

    Returns:
        LifecycleMappingMetadataSource
    """
    mappings = tuple(
        project_mapping(child)
        for child in _nested(node, ELEMENT_LIFECYCLE_MAPPINGS, ELEMENT_LIFECYCLE_MAPPING)
    )
    source = LifecycleMappingMetadataSource(
        lifecycle_mappings=mappings,
        plugin_executions=tuple(project_bindings(node)),
    )
    if reference is not None:
        source = source.with_coordinates(reference)

    if is_debug_enabled(logger):
        logger.debug(
            "Projected metadata source",
            extra=extra_context(
                event="parse",
                component="projection",
                action="project_source",
                target=str(reference) if reference else None,
                mapping_count=len(source.lifecycle_mappings),
                execution_count=len(source.plugin_executions),
            )
        )
    return source
