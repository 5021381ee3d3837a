"""Artifact resolution against Maven-layout repositories.

The local resolver only looks at a local repository directory. The remote
resolver falls back to downloading the artifact from each configured remote
repository in order, storing it in the local repository.
"""
from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from lifemap.common import http_client
from lifemap.common.logging_utils import extra_context, is_debug_enabled, safe_url
from lifemap.constants import Constants
from lifemap.errors import UnresolvedReferenceError

logger = logging.getLogger(__name__)


def artifact_path(
    group_id: str,
    artifact_id: str,
    version: str,
    type_: str = Constants.LIFECYCLE_MAPPING_METADATA_TYPE,
    classifier: Optional[str] = Constants.LIFECYCLE_MAPPING_METADATA_CLASSIFIER,
) -> str:
    """Return the repository-relative path of an artifact (forward slashes).

    Example: ``com/example/mappings/1.0/mappings-1.0-lifecycle-mapping-metadata.xml``
    """
    group_path = group_id.replace(".", "/")
    file_name = f"{artifact_id}-{version}"
    if classifier:
        file_name = f"{file_name}-{classifier}"
    return f"{group_path}/{artifact_id}/{version}/{file_name}.{type_}"


def _coordinates(group_id: str, artifact_id: str, version: str, type_: str, classifier: Optional[str]) -> str:
    if classifier:
        return f"{group_id}:{artifact_id}:{type_}:{classifier}:{version}"
    return f"{group_id}:{artifact_id}:{type_}:{version}"


class ArtifactResolver(ABC):
    """Resolves artifact coordinates to a readable local file."""

    @abstractmethod
    def resolve(
        self,
        group_id: str,
        artifact_id: str,
        version: str,
        type_: str = Constants.LIFECYCLE_MAPPING_METADATA_TYPE,
        classifier: Optional[str] = Constants.LIFECYCLE_MAPPING_METADATA_CLASSIFIER,
        repositories: Optional[Sequence[str]] = None,
    ) -> str:
        """Return the local file path of the artifact.

        Raises:
            UnresolvedReferenceError: the artifact cannot be found or fetched.
        """


class LocalRepositoryResolver(ArtifactResolver):
    """Resolves artifacts that are already present in a local repository."""

    def __init__(self, root: Optional[str] = None):
        self.root = root or Constants.LOCAL_REPOSITORY

    def local_file(self, relative: str) -> str:
        return os.path.join(self.root, *relative.split("/"))

    def resolve(
        self,
        group_id: str,
        artifact_id: str,
        version: str,
        type_: str = Constants.LIFECYCLE_MAPPING_METADATA_TYPE,
        classifier: Optional[str] = Constants.LIFECYCLE_MAPPING_METADATA_CLASSIFIER,
        repositories: Optional[Sequence[str]] = None,
    ) -> str:
        path = self.local_file(artifact_path(group_id, artifact_id, version, type_, classifier))
        if os.path.isfile(path) and os.access(path, os.R_OK):
            return path
        raise UnresolvedReferenceError(
            _coordinates(group_id, artifact_id, version, type_, classifier),
            f"not found in local repository {self.root}",
            UnresolvedReferenceError.NOT_FOUND,
        )


class RemoteRepositoryResolver(LocalRepositoryResolver):
    """Resolves from the local repository, downloading from remotes when missing."""

    def __init__(self, root: Optional[str] = None, repositories: Optional[Sequence[str]] = None):
        super().__init__(root)
        self.repositories: List[str] = list(repositories if repositories is not None else Constants.REMOTE_REPOSITORIES)

    def resolve(
        self,
        group_id: str,
        artifact_id: str,
        version: str,
        type_: str = Constants.LIFECYCLE_MAPPING_METADATA_TYPE,
        classifier: Optional[str] = Constants.LIFECYCLE_MAPPING_METADATA_CLASSIFIER,
        repositories: Optional[Sequence[str]] = None,
    ) -> str:
        try:
            return super().resolve(group_id, artifact_id, version, type_, classifier)
        except UnresolvedReferenceError:
            pass

        coordinates = _coordinates(group_id, artifact_id, version, type_, classifier)
        relative = artifact_path(group_id, artifact_id, version, type_, classifier)
        remotes = list(repositories) if repositories else self.repositories
        failures: List[str] = []
        transport_failure = False

        for base in remotes:
            url = f"{base.rstrip('/')}/{relative}"
            status, _, content = http_client.robust_get(url)
            if status == 200:
                destination = self.local_file(relative)
                os.makedirs(os.path.dirname(destination), exist_ok=True)
                with open(destination, "wb") as fh:
                    fh.write(content)
                logger.info("Downloaded %s from %s", coordinates, safe_url(base))
                return destination
            if status == 0 or status >= 500:
                transport_failure = True
            failures.append(f"{safe_url(base)} ({status or 'unreachable'})")
            if is_debug_enabled(logger):
                logger.debug(
                    "Artifact not available from repository",
                    extra=extra_context(
                        event="http_response",
                        component="artifacts",
                        action="resolve",
                        outcome="not_found" if status == 404 else "error",
                        status_code=status,
                        target=safe_url(url),
                    )
                )

        if not remotes:
            failures.append("no remote repositories configured")
        kind = UnresolvedReferenceError.REPOSITORY_ERROR if transport_failure else UnresolvedReferenceError.NOT_FOUND
        raise UnresolvedReferenceError(coordinates, "; ".join(failures), kind)
