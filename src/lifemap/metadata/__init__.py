"""Lifecycle mapping metadata package.

- models.py: immutable metadata model (filters, bindings, mappings, sources)
- matcher.py: execution filter matching
- projection.py: configuration tree to model projections
- parser.py: XML documents to configuration trees
"""

from .models import (
    ConfigNode,
    ExecutionFilter,
    LifecycleMappingMetadata,
    LifecycleMappingMetadataSource,
    MojoExecutionKey,
    PluginExecutionAction,
    PluginExecutionMetadata,
    SourceKey,
    SourceReference,
)
from .matcher import matches

__all__ = [
    "ConfigNode",
    "ExecutionFilter",
    "LifecycleMappingMetadata",
    "LifecycleMappingMetadataSource",
    "MojoExecutionKey",
    "PluginExecutionAction",
    "PluginExecutionMetadata",
    "SourceKey",
    "SourceReference",
    "matches",
]
