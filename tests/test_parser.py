"""Tests for metadata document parsing and projection."""

import pytest

from lifemap.errors import AmbiguousStateError, MalformedDocumentError, MalformedMetadataError
from lifemap.metadata import PluginExecutionAction, SourceReference
from lifemap.metadata.parser import parse_binding, parse_filter, parse_source

SOURCE_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<lifecycleMappingMetadata>
  <lifecycleMappings>
    <lifecycleMapping>
      <packagingType>war</packagingType>
      <id>org.example.war</id>
      <name>WAR</name>
      <pluginExecutions>
        <pluginExecution>
          <pluginExecutionFilter>
            <groupId>org.apache.maven.plugins</groupId>
            <artifactId>maven-war-plugin</artifactId>
            <goals><goal>war</goal></goals>
          </pluginExecutionFilter>
          <action><ignore/></action>
        </pluginExecution>
      </pluginExecutions>
    </lifecycleMapping>
  </lifecycleMappings>
  <pluginExecutions>
    <pluginExecution>
      <pluginExecutionFilter>
        <groupId>org.codehaus.mojo</groupId>
        <artifactId>build-helper-maven-plugin</artifactId>
        <versionRange>[1.0,)</versionRange>
        <goals>
          <goal>add-source</goal>
          <goal>add-test-source</goal>
        </goals>
      </pluginExecutionFilter>
      <action>
        <execute>
          <runOnIncremental>false</runOnIncremental>
        </execute>
      </action>
    </pluginExecution>
    <pluginExecution>
      <pluginExecutionFilter>
        <groupId>org.jvnet.jaxb2.maven2</groupId>
        <artifactId>maven-jaxb2-plugin</artifactId>
        <goals><goal>generate</goal></goals>
      </pluginExecutionFilter>
      <action>
        <configurator>
          <id>org.example.jaxb</id>
        </configurator>
      </action>
    </pluginExecution>
  </pluginExecutions>
</lifecycleMappingMetadata>
"""


def _binding(action_xml, filter_xml="<pluginExecutionFilter><goals><goal>g</goal></goals></pluginExecutionFilter>"):
    return f"<pluginExecution>{filter_xml}{action_xml}</pluginExecution>".encode("utf-8")


class TestParseSource:
    """Whole metadata documents."""

    def test_parses_mappings_and_bindings(self):
        ref = SourceReference("com.example", "mappings", "1.0")
        src = parse_source(SOURCE_XML, ref)

        assert (src.group_id, src.artifact_id, src.version) == ("com.example", "mappings", "1.0")
        assert len(src.lifecycle_mappings) == 1
        war = src.lifecycle_mappings[0]
        assert war.id == "org.example.war"
        assert war.name == "WAR"
        assert war.packaging_type == "war"
        assert war.plugin_executions[0].action is PluginExecutionAction.IGNORE

        execute, delegate = src.plugin_executions
        assert execute.action is PluginExecutionAction.EXECUTE
        assert execute.run_on_incremental is False
        assert execute.filter.version_range == "[1.0,)"
        assert execute.filter.goals == frozenset({"add-source", "add-test-source"})
        assert delegate.action is PluginExecutionAction.DELEGATE
        assert delegate.configurator_id == "org.example.jaxb"

    def test_namespaced_document(self):
        data = SOURCE_XML.replace(
            b"<lifecycleMappingMetadata>",
            b'<lifecycleMappingMetadata xmlns="http://example.org/ns">',
        )
        src = parse_source(data)
        assert len(src.plugin_executions) == 2

    def test_not_well_formed(self):
        with pytest.raises(MalformedDocumentError) as excinfo:
            parse_source(b"<lifecycleMappingMetadata>", SourceReference("g", "a", "1"))
        assert "g:a:1" in str(excinfo.value)

    def test_wrong_root(self):
        with pytest.raises(MalformedDocumentError):
            parse_source(b"<project/>")

    def test_mapping_without_id(self):
        data = b"""<lifecycleMappingMetadata><lifecycleMappings><lifecycleMapping>
            <packagingType>war</packagingType>
        </lifecycleMapping></lifecycleMappings></lifecycleMappingMetadata>"""
        with pytest.raises(MalformedMetadataError):
            parse_source(data)

    def test_empty_document_has_no_entries(self):
        src = parse_source(b"<lifecycleMappingMetadata/>")
        assert src.lifecycle_mappings == ()
        assert src.plugin_executions == ()


class TestParseBinding:
    """Single pluginExecution elements."""

    def test_execute_defaults_run_on_incremental(self):
        b = parse_binding(_binding("<action><execute/></action>"))
        assert b.action is PluginExecutionAction.EXECUTE
        assert b.run_on_incremental is True

    def test_run_on_incremental_only_true_literal(self):
        b = parse_binding(_binding("<action><execute><runOnIncremental>yes</runOnIncremental></execute></action>"))
        assert b.run_on_incremental is False
        b = parse_binding(_binding("<action><execute><runOnIncremental>TRUE</runOnIncremental></execute></action>"))
        assert b.run_on_incremental is True

    def test_missing_filter_is_catch_all(self):
        b = parse_binding(_binding("<action><ignore/></action>", filter_xml=""))
        assert b.filter.group_id is None
        assert b.filter.goals == frozenset()

    def test_missing_action(self):
        with pytest.raises(MalformedMetadataError):
            parse_binding(_binding(""))

    def test_empty_action(self):
        with pytest.raises(MalformedMetadataError):
            parse_binding(_binding("<action/>"))

    def test_multiple_actions(self):
        with pytest.raises(MalformedMetadataError):
            parse_binding(_binding("<action><ignore/><execute/></action>"))

    def test_unknown_action(self):
        with pytest.raises(AmbiguousStateError):
            parse_binding(_binding("<action><explode/></action>"))

    @pytest.mark.parametrize("action_xml", [
        "<action><configurator/></action>",
        "<action><configurator><id>   </id></configurator></action>",
    ])
    def test_configurator_requires_id(self, action_xml):
        with pytest.raises(MalformedMetadataError) as excinfo:
            parse_binding(_binding(action_xml))
        assert "configurator id must be specified" in str(excinfo.value)

    def test_invalid_version_range(self):
        filter_xml = "<pluginExecutionFilter><versionRange>[1.0</versionRange></pluginExecutionFilter>"
        with pytest.raises(MalformedMetadataError):
            parse_binding(_binding("<action><ignore/></action>", filter_xml=filter_xml))


def test_parse_filter():
    f = parse_filter(b"""<pluginExecutionFilter>
        <groupId> org.example </groupId>
        <artifactId>plugin</artifactId>
        <goals><goal>a</goal><goal>b</goal></goals>
    </pluginExecutionFilter>""")
    assert f.group_id == "org.example"
    assert f.artifact_id == "plugin"
    assert f.version_range is None
    assert f.goals == frozenset({"a", "b"})
