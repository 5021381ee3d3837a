"""Resolvers for lifecycle mappings and project configurators."""

from .configurator import ProjectConfiguratorResolver
from .lifecycle import LifecycleMappingResolver

__all__ = [
    "LifecycleMappingResolver",
    "ProjectConfiguratorResolver",
]
