"""Constants used in the project."""

import os
from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    CONFIGURATION_ERROR = 3


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    # Project declaration surface
    POM_XML_FILE = "pom.xml"
    POM_NAMESPACE = "http://maven.apache.org/POM/4.0.0"
    DEFAULT_PACKAGING = "jar"
    DEFAULT_PLUGIN_GROUP_ID = "org.apache.maven.plugins"
    METADATA_SOURCES_PLUGIN_KEY = "org.eclipse.m2e:lifecycle-mapping"
    ELEMENT_SOURCES = "sources"
    ELEMENT_SOURCE = "source"

    # Metadata artifacts
    LIFECYCLE_MAPPING_METADATA_TYPE = "xml"
    LIFECYCLE_MAPPING_METADATA_CLASSIFIER = "lifecycle-mapping-metadata"
    ELEMENT_RUN_ON_INCREMENTAL = "runOnIncremental"
    ELEMENT_CONFIGURATOR_ID = "id"

    # Repositories
    REMOTE_REPOSITORIES = ["https://repo1.maven.org/maven2"]
    LOCAL_REPOSITORY = os.path.join(os.path.expanduser("~"), ".m2", "repository")
    OFFLINE = False
    REGISTRY_FILE = None

    # Logging
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "LIFEMAP_LOG_LEVEL"
    ENV_CONFIG = "LIFEMAP_CONFIG"
    ENV_LOCAL_REPOSITORY = "LIFEMAP_LOCAL_REPOSITORY"
    ENV_REGISTRY = "LIFEMAP_REGISTRY"

    # HTTP
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3
