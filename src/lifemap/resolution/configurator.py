"""Project configurator resolution for mojo executions."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from lifemap.common.logging_utils import extra_context, is_debug_enabled
from lifemap.configurators import (
    Configurator,
    DelegateConfigurator,
    ExecuteConfigurator,
    IgnoreConfigurator,
)
from lifemap.constants import Constants
from lifemap.errors import AmbiguousStateError, MalformedMetadataError, NotInstalledError
from lifemap.metadata.models import (
    LifecycleMappingMetadataSource,
    MojoExecutionKey,
    PluginExecutionAction,
    PluginExecutionMetadata,
)
from lifemap.registry.base import CapabilityRegistry
from lifemap.registry.lookup import RegistryView

logger = logging.getLogger(__name__)


class ProjectConfiguratorResolver:
    """Decides which configurator runs for a mojo execution.

    Project metadata sources are consulted first, in override-list order; the
    first binding whose filter matches wins. Otherwise the registry's own
    configurators are scanned by their pre-bound filters.
    """

    def __init__(self, registry: CapabilityRegistry):
        self._registry = registry

    def resolve_for_execution(
        self,
        sources: Iterable[LifecycleMappingMetadataSource],
        execution: MojoExecutionKey,
    ) -> Optional[Configurator]:
        """Return the configurator for ``execution``, or None when nothing manages it.

        Args:
            sources: Metadata sources, highest priority first
            execution: The mojo execution to classify

        Returns:
            Configurator or None
        """
        view = RegistryView(self._registry)
        for source in sources:
            for binding in source.plugin_executions:
                if binding.filter.match(execution):
                    if is_debug_enabled(logger):
                        logger.debug(
                            "Project binding matched execution",
                            extra=extra_context(
                                event="decision",
                                component="configurator_resolver",
                                action="resolve_for_execution",
                                outcome="project_match",
                                target=str(execution),
                                source=str(source),
                                filter=str(binding.filter),
                            )
                        )
                    return self.create_configurator(binding, view)
        return self.registry_configurator_for(execution, view)

    def create_configurator(
        self, binding: PluginExecutionMetadata, view: Optional[RegistryView] = None
    ) -> Configurator:
        """Materialize the configurator a binding's action asks for.

        Raises:
            MalformedMetadataError: a delegate binding has a blank configurator id.
            NotInstalledError: a delegate's configurator is not registered.
            AmbiguousStateError: the binding has no recognized action.
        """
        action = binding.action
        if action is PluginExecutionAction.IGNORE:
            return IgnoreConfigurator(binding.filter)
        if action is PluginExecutionAction.EXECUTE:
            return ExecuteConfigurator(binding.filter, binding.run_on_incremental)
        if action is PluginExecutionAction.DELEGATE:
            configurator_id = (
                binding.configurator_id
                or binding.configuration.child_value(Constants.ELEMENT_CONFIGURATOR_ID)
                or ""
            ).strip()
            if not configurator_id:
                raise MalformedMetadataError(
                    f"A configurator id must be specified for plugin execution filter {binding.filter}"
                )
            configurator = self._materialize(configurator_id, view or RegistryView(self._registry), bare=True)
            return configurator.with_filter(binding.filter)
        raise AmbiguousStateError(f"An action must be specified (filter {binding.filter}).")

    def get_project_configurator(self, configurator_id: str) -> Optional[DelegateConfigurator]:
        """Return a registry configurator with its pre-bound filters.

        None when the id is not registered or its implementation cannot be loaded.
        """
        view = RegistryView(self._registry)
        if view.configurator_by_id(configurator_id) is None:
            return None
        try:
            return self._materialize(configurator_id, view, bare=False)
        except NotInstalledError as exc:
            logger.error("Skipping project configurator '%s': %s", configurator_id, exc)
            return None

    def registry_configurator_for(
        self, execution: MojoExecutionKey, view: Optional[RegistryView] = None
    ) -> Optional[DelegateConfigurator]:
        """First loadable registry configurator whose pre-bound filters select ``execution``.

        Entries whose implementation fails to load are logged and skipped.
        """
        view = view or RegistryView(self._registry)
        for entry in view.configurators_for(execution):
            if is_debug_enabled(logger):
                logger.debug(
                    "Registry configurator matched execution",
                    extra=extra_context(
                        event="decision",
                        component="configurator_resolver",
                        action="registry_configurator_for",
                        outcome="registry_match",
                        target=str(execution),
                        configurator=entry.id,
                    )
                )
            try:
                return self._materialize(entry.id, view, bare=False)
            except NotInstalledError as exc:
                logger.error("Skipping project configurator '%s' for %s: %s", entry.id, execution, exc)

        if is_debug_enabled(logger):
            logger.debug(
                "No configurator for execution",
                extra=extra_context(
                    event="decision",
                    component="configurator_resolver",
                    action="registry_configurator_for",
                    outcome="unmanaged",
                    target=str(execution),
                )
            )
        return None

    def _materialize(self, configurator_id: str, view: RegistryView, bare: bool) -> DelegateConfigurator:
        """Instantiate a registry configurator.

        A bare configurator carries no filters of its own; the caller binds it.
        """
        target = view.resolve_configurator(configurator_id)
        entry = view.configurator_by_id(configurator_id)
        try:
            implementation = view.instantiate(target.id, NotInstalledError.CONFIGURATOR)
        except NotInstalledError:
            logger.error("Project configurator '%s' could not be instantiated", target.id)
            raise
        filters = () if bare else (entry.filters if entry and entry.filters else target.filters)
        return DelegateConfigurator(
            configurator_id=target.id,
            name=target.name,
            implementation=implementation,
            filters=tuple(filters),
        )
