"""High-level entry point tying source loading and resolution together."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple, Union

from lifemap.common.logging_utils import Timer, extra_context, is_debug_enabled
from lifemap.configurators import Configurator, LifecycleMapping
from lifemap.metadata.models import LifecycleMappingMetadataSource, MojoExecutionKey, SourceReference
from lifemap.project import ProjectModel
from lifemap.registry.base import CapabilityRegistry
from lifemap.resolution import LifecycleMappingResolver, ProjectConfiguratorResolver
from lifemap.sources import MetadataSourceOverrideList, SourceResolver, build_override_list

logger = logging.getLogger(__name__)


class LifecycleMappingService:
    """Resolves lifecycle mappings and configurators for a project.

    Args:
        registry: The installed capabilities
        loader: Fetches and parses one metadata source reference
    """

    def __init__(self, registry: CapabilityRegistry, loader: SourceResolver):
        self.registry = registry
        self.loader = loader
        self.configurator_resolver = ProjectConfiguratorResolver(registry)
        self.lifecycle_resolver = LifecycleMappingResolver(registry, self.configurator_resolver)

    def metadata_sources(
        self, project_or_refs: Union[ProjectModel, Iterable[SourceReference]]
    ) -> MetadataSourceOverrideList:
        """Build the override list for a project or an explicit list of references."""
        if isinstance(project_or_refs, ProjectModel):
            references = project_or_refs.source_references
        else:
            references = tuple(project_or_refs)
        return build_override_list(references, self.loader)

    def lifecycle_mapping(
        self,
        project: ProjectModel,
        packaging: Optional[str] = None,
        sources: Optional[Iterable[LifecycleMappingMetadataSource]] = None,
    ) -> Optional[LifecycleMapping]:
        """Resolve the lifecycle mapping for the project's (or the given) packaging type."""
        packaging_type = packaging or project.packaging
        if sources is None:
            sources = self.metadata_sources(project)
        with Timer() as timer:
            mapping = self.lifecycle_resolver.get_lifecycle_mapping(sources, packaging_type)
        if is_debug_enabled(logger):
            logger.debug(
                "Lifecycle mapping resolved",
                extra=extra_context(
                    event="function_exit",
                    component="service",
                    action="lifecycle_mapping",
                    outcome="found" if mapping is not None else "none",
                    target=packaging_type,
                    mapping=mapping.id if mapping is not None else None,
                    duration_ms=timer.duration_ms(),
                )
            )
        return mapping

    def configurator_for(
        self,
        sources: Iterable[LifecycleMappingMetadataSource],
        execution: MojoExecutionKey,
    ) -> Optional[Configurator]:
        return self.configurator_resolver.resolve_for_execution(sources, execution)

    def configurators_for_project(
        self, project: ProjectModel
    ) -> List[Tuple[MojoExecutionKey, Optional[Configurator]]]:
        """Classify every mojo execution declared by the project.

        Sources are loaded once and shared by all executions.
        """
        sources = self.metadata_sources(project)
        results: List[Tuple[MojoExecutionKey, Optional[Configurator]]] = []
        counts: Dict[str, int] = {}
        for execution in project.executions:
            configurator = self.configurator_for(sources, execution)
            kind = configurator.kind if configurator is not None else "unmanaged"
            counts[kind] = counts.get(kind, 0) + 1
            results.append((execution, configurator))
        if counts.get("unmanaged"):
            logger.warning(
                "%d plugin execution(s) of %s are not covered by lifecycle configuration",
                counts["unmanaged"], project,
            )
        logger.info("Classified %d executions of %s: %s", len(results), project, counts)
        return results
