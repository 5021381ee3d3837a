"""Tests for the lifemap command line."""

import json

import pytest

from lifemap.artifacts import artifact_path
from lifemap.cli import main
from lifemap.constants import ExitCodes

POM = b"""<project>
  <groupId>com.example</groupId>
  <artifactId>app</artifactId>
  <version>1.0</version>
  <packaging>war</packaging>
  <build>
    <pluginManagement><plugins><plugin>
      <groupId>org.eclipse.m2e</groupId>
      <artifactId>lifecycle-mapping</artifactId>
      <configuration><sources>
        <source><groupId>com.example</groupId><artifactId>mappings</artifactId><version>1.0</version></source>
      </sources></configuration>
    </plugin></plugins></pluginManagement>
  </build>
</project>"""

METADATA = b"""<lifecycleMappingMetadata>
  <lifecycleMappings>
    <lifecycleMapping>
      <id>example.war</id>
      <packagingType>war</packagingType>
    </lifecycleMapping>
  </lifecycleMappings>
  <pluginExecutions>
    <pluginExecution>
      <pluginExecutionFilter>
        <artifactId>maven-war-plugin</artifactId>
        <goals><goal>war</goal></goals>
      </pluginExecutionFilter>
      <action><ignore/></action>
    </pluginExecution>
  </pluginExecutions>
</lifecycleMappingMetadata>"""


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """A project and an offline local repository holding its metadata source."""
    for name in ("LIFEMAP_CONFIG", "LIFEMAP_REGISTRY", "LIFEMAP_LOCAL_REPOSITORY"):
        monkeypatch.delenv(name, raising=False)
    # main() exports --loglevel through the environment
    monkeypatch.setenv("LIFEMAP_LOG_LEVEL", "ERROR")
    project = tmp_path / "project"
    project.mkdir()
    (project / "pom.xml").write_bytes(POM)
    repo = tmp_path / "repo"
    target = repo.joinpath(*artifact_path("com.example", "mappings", "1.0").split("/"))
    target.parent.mkdir(parents=True)
    target.write_bytes(METADATA)
    return project, repo


def _run(argv):
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    return excinfo.value.code


def _common(repo):
    return ["--offline", "--local-repository", str(repo), "--loglevel", "ERROR"]


class TestCli:
    """Subcommands and exit codes."""

    def test_sources(self, workspace, capsys):
        project, repo = workspace
        code = _run(_common(repo) + ["sources", "--pom", str(project)])
        assert code == ExitCodes.SUCCESS.value
        payload = json.loads(capsys.readouterr().out)
        assert [s["artifactId"] for s in payload] == ["mappings"]

    def test_mapping(self, workspace, capsys):
        project, repo = workspace
        code = _run(_common(repo) + ["mapping", "--pom", str(project)])
        assert code == ExitCodes.SUCCESS.value
        assert json.loads(capsys.readouterr().out)["id"] == "example.war"

    def test_mapping_unknown_packaging_prints_null(self, workspace, capsys):
        project, repo = workspace
        code = _run(_common(repo) + ["mapping", "--pom", str(project), "--packaging", "ear"])
        assert code == ExitCodes.SUCCESS.value
        assert json.loads(capsys.readouterr().out) is None

    def test_configurator(self, workspace, capsys):
        project, repo = workspace
        code = _run(_common(repo) + [
            "configurator", "--pom", str(project),
            "--execution", "org.apache.maven.plugins:maven-war-plugin:3.4.0:war",
        ])
        assert code == ExitCodes.SUCCESS.value
        assert json.loads(capsys.readouterr().out)["kind"] == "ignore"

    def test_bad_execution_coordinates(self, workspace):
        project, repo = workspace
        code = _run(_common(repo) + ["configurator", "--pom", str(project), "--execution", "nope"])
        assert code == ExitCodes.CONFIGURATION_ERROR.value

    def test_missing_metadata_source(self, workspace, tmp_path):
        project, _ = workspace
        code = _run(_common(tmp_path / "empty-repo") + ["sources", "--pom", str(project)])
        assert code == ExitCodes.FILE_ERROR.value

    def test_missing_pom(self, workspace, tmp_path):
        _, repo = workspace
        code = _run(_common(repo) + ["sources", "--pom", str(tmp_path / "nowhere")])
        assert code == ExitCodes.FILE_ERROR.value

    def test_invalid_registry(self, workspace, tmp_path):
        project, repo = workspace
        registry = tmp_path / "registry.yaml"
        registry.write_text("configurators: [{name: missing-id}]\n", encoding="utf-8")
        code = _run(_common(repo) + ["--registry", str(registry), "sources", "--pom", str(project)])
        assert code == ExitCodes.CONFIGURATION_ERROR.value
