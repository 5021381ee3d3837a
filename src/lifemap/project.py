"""Project declaration surface: reading metadata source references from a POM.

A project declares its lifecycle mapping metadata sources under the
``org.eclipse.m2e:lifecycle-mapping`` entry of ``build/pluginManagement``::

    <plugin>
      <groupId>org.eclipse.m2e</groupId>
      <artifactId>lifecycle-mapping</artifactId>
      <configuration>
        <sources>
          <source>
            <groupId>com.example</groupId>
            <artifactId>mappings</artifactId>
            <version>1.0</version>
          </source>
        </sources>
      </configuration>
    </plugin>
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from lifemap.constants import Constants
from lifemap.errors import MalformedMetadataError
from lifemap.metadata.models import ConfigNode, MojoExecutionKey, SourceReference
from lifemap.metadata.parser import parse_document

logger = logging.getLogger(__name__)

PomInput = Union[str, bytes, os.PathLike]


@dataclass(frozen=True)
class ProjectModel:
    """The parts of a POM that drive lifecycle mapping resolution."""

    group_id: Optional[str]
    artifact_id: Optional[str]
    version: Optional[str]
    packaging: str = Constants.DEFAULT_PACKAGING
    source_references: Tuple[SourceReference, ...] = ()
    executions: Tuple[MojoExecutionKey, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"


def _read_pom(pom: PomInput) -> ConfigNode:
    if isinstance(pom, bytes):
        return parse_document(pom, "pom.xml")
    path = os.fspath(pom)
    if os.path.isdir(path):
        path = os.path.join(path, Constants.POM_XML_FILE)
    with open(path, "rb") as fh:
        return parse_document(fh.read(), path)


def _plugins(container: Optional[ConfigNode]) -> List[ConfigNode]:
    if container is None:
        return []
    plugins = container.get_child("plugins")
    return plugins.get_children("plugin") if plugins is not None else []


def _plugin_key(plugin: ConfigNode) -> str:
    group_id = plugin.child_value("groupId") or Constants.DEFAULT_PLUGIN_GROUP_ID
    return f"{group_id}:{plugin.child_value('artifactId')}"


def source_references_from(root: ConfigNode) -> List[SourceReference]:
    """Extract declared metadata source references from a parsed POM.

    Returns an empty list when any part of the declaration section is absent.

    Raises:
        MalformedMetadataError: a ``source`` lacks groupId, artifactId or version.
    """
    build = root.get_child("build")
    plugin_management = build.get_child("pluginManagement") if build is not None else None
    plugin = None
    for candidate in _plugins(plugin_management):
        if _plugin_key(candidate) == Constants.METADATA_SOURCES_PLUGIN_KEY:
            plugin = candidate
            break
    if plugin is None:
        return []
    configuration = plugin.get_child("configuration")
    if configuration is None:
        return []
    sources = configuration.get_child(Constants.ELEMENT_SOURCES)
    if sources is None:
        return []

    references: List[SourceReference] = []
    for index, source in enumerate(sources.get_children(Constants.ELEMENT_SOURCE)):
        values = {name: source.child_value(name) for name in ("groupId", "artifactId", "version")}
        missing = [name for name, value in values.items() if value is None]
        if missing:
            raise MalformedMetadataError(
                f"Lifecycle mapping metadata source #{index + 1} "
                f"({values['groupId']}:{values['artifactId']}:{values['version']}) "
                f"is missing {', '.join(missing)}"
            )
        references.append(SourceReference(values["groupId"], values["artifactId"], values["version"]))
    return references


def read_source_references(pom: PomInput) -> List[SourceReference]:
    """Read declared metadata source references from a POM path, directory or bytes."""
    return source_references_from(_read_pom(pom))


def _executions_from(root: ConfigNode) -> List[MojoExecutionKey]:
    build = root.get_child("build")
    managed = {}
    if build is not None:
        for plugin in _plugins(build.get_child("pluginManagement")):
            managed[_plugin_key(plugin)] = plugin.child_value("version")

    executions: List[MojoExecutionKey] = []
    for plugin in _plugins(build):
        if plugin.child_value("artifactId") is None:
            continue
        key = _plugin_key(plugin)
        group_id, artifact_id = key.split(":", 1)
        version = plugin.child_value("version") or managed.get(key) or ""
        holder = plugin.get_child("executions")
        for execution in holder.get_children("execution") if holder is not None else []:
            goals = execution.get_child("goals")
            for goal in goals.get_children("goal") if goals is not None else []:
                if not goal.value:
                    continue
                executions.append(MojoExecutionKey(
                    group_id=group_id,
                    artifact_id=artifact_id,
                    version=version,
                    goal=goal.value,
                    execution_id=execution.child_value("id") or "default",
                    lifecycle_phase=execution.child_value("phase"),
                ))
    return executions


def load_project(pom: PomInput) -> ProjectModel:
    """Load the resolution-relevant parts of a POM.

    Args:
        pom: Path to a pom.xml, a directory containing one, or raw bytes

    Returns:
        ProjectModel
    """
    root = _read_pom(pom)
    parent = root.get_child("parent")
    group_id = root.child_value("groupId") or (parent.child_value("groupId") if parent else None)
    version = root.child_value("version") or (parent.child_value("version") if parent else None)
    project = ProjectModel(
        group_id=group_id,
        artifact_id=root.child_value("artifactId"),
        version=version,
        packaging=root.child_value("packaging") or Constants.DEFAULT_PACKAGING,
        source_references=tuple(source_references_from(root)),
        executions=tuple(_executions_from(root)),
    )
    logger.debug(
        "Loaded project %s (%s): %d metadata sources, %d executions",
        project, project.packaging, len(project.source_references), len(project.executions),
    )
    return project
