"""Global capability registry package.

- base.py: registry interface and entry types
- static.py: table-backed registry and YAML loading
- lookup.py: per-call view with memoized instantiation
"""

from .base import CapabilityRegistry, ConfiguratorEntry, LifecycleMappingEntry
from .lookup import RegistryView
from .static import StaticCapabilityRegistry, import_factory, load_registry, registry_from_dict

__all__ = [
    "CapabilityRegistry",
    "ConfiguratorEntry",
    "LifecycleMappingEntry",
    "RegistryView",
    "StaticCapabilityRegistry",
    "import_factory",
    "load_registry",
    "registry_from_dict",
]
