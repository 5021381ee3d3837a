"""Tests for artifact resolution against local and remote repositories."""

from unittest.mock import patch

import pytest

from lifemap.artifacts import LocalRepositoryResolver, RemoteRepositoryResolver, artifact_path
from lifemap.errors import UnresolvedReferenceError

RELATIVE = "com/example/mappings/1.0/mappings-1.0-lifecycle-mapping-metadata.xml"


def test_artifact_path():
    assert artifact_path("com.example", "mappings", "1.0") == RELATIVE
    assert artifact_path("g", "a", "1", "jar", None) == "g/a/1/a-1.jar"


class TestLocalRepositoryResolver:
    """Local repository lookups."""

    def test_resolves_existing_file(self, tmp_path):
        target = tmp_path.joinpath(*RELATIVE.split("/"))
        target.parent.mkdir(parents=True)
        target.write_bytes(b"<lifecycleMappingMetadata/>")
        assert LocalRepositoryResolver(str(tmp_path)).resolve("com.example", "mappings", "1.0") == str(target)

    def test_missing_file(self, tmp_path):
        with pytest.raises(UnresolvedReferenceError) as excinfo:
            LocalRepositoryResolver(str(tmp_path)).resolve("com.example", "mappings", "1.0")
        assert excinfo.value.kind == UnresolvedReferenceError.NOT_FOUND
        assert "com.example:mappings" in str(excinfo.value)


class TestRemoteRepositoryResolver:
    """Downloads through the shared HTTP client."""

    @patch("lifemap.artifacts.http_client.robust_get")
    def test_downloads_into_local_repository(self, mock_get, tmp_path):
        mock_get.return_value = (200, {}, b"<lifecycleMappingMetadata/>")
        resolver = RemoteRepositoryResolver(str(tmp_path), ["https://repo.example.org/maven2/"])

        path = resolver.resolve("com.example", "mappings", "1.0")

        mock_get.assert_called_once_with(f"https://repo.example.org/maven2/{RELATIVE}")
        with open(path, "rb") as fh:
            assert fh.read() == b"<lifecycleMappingMetadata/>"
        # Second resolution is served locally
        resolver.resolve("com.example", "mappings", "1.0")
        assert mock_get.call_count == 1

    @patch("lifemap.artifacts.http_client.robust_get")
    def test_tries_repositories_in_order(self, mock_get, tmp_path):
        mock_get.side_effect = [(404, {}, b""), (200, {}, b"<x/>")]
        resolver = RemoteRepositoryResolver(str(tmp_path), ["https://one.example.org", "https://two.example.org"])
        resolver.resolve("com.example", "mappings", "1.0")
        urls = [c.args[0] for c in mock_get.call_args_list]
        assert urls[0].startswith("https://one.example.org/")
        assert urls[1].startswith("https://two.example.org/")

    @patch("lifemap.artifacts.http_client.robust_get")
    def test_not_found_everywhere(self, mock_get, tmp_path):
        mock_get.return_value = (404, {}, b"")
        resolver = RemoteRepositoryResolver(str(tmp_path), ["https://repo.example.org"])
        with pytest.raises(UnresolvedReferenceError) as excinfo:
            resolver.resolve("com.example", "mappings", "1.0")
        assert excinfo.value.kind == UnresolvedReferenceError.NOT_FOUND

    @patch("lifemap.artifacts.http_client.robust_get")
    def test_transport_failure_is_repository_error(self, mock_get, tmp_path):
        mock_get.return_value = (0, {}, b"Request failed after 3 attempts: timeout")
        resolver = RemoteRepositoryResolver(str(tmp_path), ["https://repo.example.org"])
        with pytest.raises(UnresolvedReferenceError) as excinfo:
            resolver.resolve("com.example", "mappings", "1.0")
        assert excinfo.value.kind == UnresolvedReferenceError.REPOSITORY_ERROR

    @patch("lifemap.artifacts.http_client.robust_get")
    def test_explicit_repositories_override_defaults(self, mock_get, tmp_path):
        mock_get.return_value = (200, {}, b"<x/>")
        resolver = RemoteRepositoryResolver(str(tmp_path), ["https://default.example.org"])
        resolver.resolve("g", "a", "1", repositories=["https://explicit.example.org"])
        assert mock_get.call_args.args[0].startswith("https://explicit.example.org/")
