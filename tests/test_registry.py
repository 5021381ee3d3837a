"""Tests for the static capability registry and registry views."""

import pytest

from lifemap.errors import MalformedMetadataError, NotInstalledError
from lifemap.metadata import PluginExecutionAction
from lifemap.registry import (
    ConfiguratorEntry,
    LifecycleMappingEntry,
    RegistryView,
    StaticCapabilityRegistry,
    import_factory,
    load_registry,
    registry_from_dict,
)

from helpers import RecordingRegistry, execution


class Sample:
    """Stand-in implementation used through import_factory."""


def _boom():
    raise RuntimeError("cannot start")


REGISTRY_YAML = """
lifecycleMappings:
  - id: org.example.war
    name: WAR projects
    packagingType: war
    class: test_registry:Sample
    pluginExecutions:
      - pluginExecutionFilter:
          groupId: org.apache.maven.plugins
          artifactId: maven-war-plugin
          goals: [war]
        action: ignore
      - pluginExecutionFilter:
          artifactId: maven-resources-plugin
        action:
          execute:
            runOnIncremental: false
configurators:
  - id: org.example.jaxb
    name: JAXB
    class: test_registry:Sample
    pluginExecutionFilters:
      - groupId: org.jvnet.jaxb2.maven2
        artifactId: maven-jaxb2-plugin
        versionRange: "[0.7,)"
        goals: [generate]
  - id: org.example.old-jaxb
    aliasOf: org.example.jaxb
"""


class TestLoadRegistry:
    """YAML tables."""

    def test_load(self, tmp_path):
        path = tmp_path / "registry.yaml"
        path.write_text(REGISTRY_YAML, encoding="utf-8")
        registry = load_registry(str(path))

        (war,) = registry.list_lifecycle_mappings()
        assert war.packaging_type == "war"
        ignore, execute = war.plugin_executions
        assert ignore.action is PluginExecutionAction.IGNORE
        assert ignore.filter.goals == frozenset({"war"})
        assert execute.action is PluginExecutionAction.EXECUTE
        assert execute.run_on_incremental is False

        jaxb, old = registry.list_configurators()
        assert jaxb.filters[0].version_range == "[0.7,)"
        assert old.alias_of == "org.example.jaxb"
        assert isinstance(registry.instantiate("org.example.jaxb"), Sample)

    def test_schema_violation(self):
        with pytest.raises(MalformedMetadataError) as excinfo:
            registry_from_dict({"configurators": [{"name": "no id"}]})
        assert "configurators/0" in str(excinfo.value)

    def test_unknown_key(self):
        with pytest.raises(MalformedMetadataError):
            registry_from_dict({"plugins": []})

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "registry.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(MalformedMetadataError):
            load_registry(str(path))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "registry.yaml"
        path.write_text("configurators: [\n", encoding="utf-8")
        with pytest.raises(MalformedMetadataError):
            load_registry(str(path))

    def test_empty_file(self, tmp_path):
        path = tmp_path / "registry.yaml"
        path.write_text("", encoding="utf-8")
        registry = load_registry(str(path))
        assert registry.list_configurators() == ()


class TestInstantiate:
    """Implementation creation."""

    def test_import_factory_calls_class(self):
        assert isinstance(import_factory("test_registry:Sample")(), Sample)

    def test_missing_entry(self):
        with pytest.raises(NotInstalledError) as excinfo:
            StaticCapabilityRegistry().instantiate("nope")
        assert "'nope'" in str(excinfo.value)
        assert "install the project configurator" in str(excinfo.value)

    def test_entry_without_factory(self):
        registry = StaticCapabilityRegistry(configurators=[ConfiguratorEntry("c")])
        assert registry.instantiate("c") is None

    def test_failing_factory(self):
        registry = StaticCapabilityRegistry(configurators=[ConfiguratorEntry("c", factory=_boom)])
        with pytest.raises(NotInstalledError) as excinfo:
            registry.instantiate("c")
        assert "instantiation failed" in str(excinfo.value)

    def test_unimportable_class(self):
        registry = registry_from_dict({"configurators": [{"id": "c", "class": "no_such_module_x:Thing"}]})
        with pytest.raises(NotInstalledError):
            registry.instantiate("c")

    def test_lifecycle_mapping_kind(self):
        registry = StaticCapabilityRegistry(lifecycle_mappings=[LifecycleMappingEntry("m", factory=Sample)])
        assert isinstance(registry.instantiate("m", NotInstalledError.LIFECYCLE_MAPPING), Sample)
        with pytest.raises(NotInstalledError) as excinfo:
            registry.instantiate("m")
        assert excinfo.value.kind == NotInstalledError.CONFIGURATOR


class TestRegistryView:
    """Per-call lookups."""

    def test_enumerates_once_and_memoizes(self):
        registry = RecordingRegistry(configurators=[ConfiguratorEntry("c", factory=Sample)])
        view = RegistryView(registry)
        first = view.instantiate("c")
        assert view.instantiate("c") is first
        assert view.configurator_by_id("c") is not None
        assert view.configurator_by_id("c") is not None
        assert registry.calls.count(("instantiate", "c", "configurator")) == 1
        assert registry.calls.count(("list_configurators",)) == 2

    def test_fresh_view_gets_fresh_instance(self):
        registry = StaticCapabilityRegistry(configurators=[ConfiguratorEntry("c", factory=Sample)])
        assert RegistryView(registry).instantiate("c") is not RegistryView(registry).instantiate("c")

    def test_alias_resolution(self):
        registry = StaticCapabilityRegistry(configurators=[
            ConfiguratorEntry("old", alias_of="mid"),
            ConfiguratorEntry("mid", alias_of="new"),
            ConfiguratorEntry("new", name="New"),
        ])
        assert RegistryView(registry).resolve_configurator("old").id == "new"

    def test_alias_cycle(self):
        registry = StaticCapabilityRegistry(configurators=[
            ConfiguratorEntry("a", alias_of="b"),
            ConfiguratorEntry("b", alias_of="a"),
        ])
        with pytest.raises(MalformedMetadataError) as excinfo:
            RegistryView(registry).resolve_configurator("a")
        assert "a -> b -> a" in str(excinfo.value)

    def test_dangling_alias(self):
        registry = StaticCapabilityRegistry(configurators=[ConfiguratorEntry("a", alias_of="gone")])
        with pytest.raises(NotInstalledError) as excinfo:
            RegistryView(registry).resolve_configurator("a")
        assert excinfo.value.identifier == "gone"

    def test_configurators_for_uses_prebound_filters(self):
        from lifemap.metadata import ExecutionFilter

        registry = StaticCapabilityRegistry(configurators=[
            ConfiguratorEntry("x", filters=(ExecutionFilter(artifact_id="other"),)),
            ConfiguratorEntry("y", filters=(ExecutionFilter(artifact_id="plugin"),)),
            ConfiguratorEntry("z"),
        ])
        found = [e.id for e in RegistryView(registry).configurators_for(execution())]
        assert found == ["y"]
