"""Command-line entry point for lifemap."""

from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any

from lifemap.args import parse_args
from lifemap.artifacts import LocalRepositoryResolver, RemoteRepositoryResolver
from lifemap.common.logging_utils import configure_logging, extra_context, is_debug_enabled
from lifemap.config import configure
from lifemap.constants import Constants, ExitCodes
from lifemap.errors import (
    LifecycleMappingConfigurationError,
    NotInstalledError,
    UnresolvedReferenceError,
)
from lifemap.loader import MetadataSourceLoader
from lifemap.metadata.models import MojoExecutionKey
from lifemap.project import load_project
from lifemap.registry.static import StaticCapabilityRegistry, load_registry
from lifemap.service import LifecycleMappingService

logger = logging.getLogger(__name__)


def _setup_logging(args: Any) -> None:
    """Configure logging based on CLI arguments."""
    if getattr(args, "LOG_LEVEL", None):
        os.environ[Constants.ENV_LOG_LEVEL] = str(args.LOG_LEVEL).upper()
    configure_logging()

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def build_service() -> LifecycleMappingService:
    """Assemble the service from the current ``Constants`` configuration."""
    if Constants.REGISTRY_FILE:
        registry = load_registry(Constants.REGISTRY_FILE)
    else:
        logger.info("No capability registry configured; only project metadata will be used.")
        registry = StaticCapabilityRegistry()

    if Constants.OFFLINE:
        resolver = LocalRepositoryResolver(Constants.LOCAL_REPOSITORY)
    else:
        resolver = RemoteRepositoryResolver(Constants.LOCAL_REPOSITORY, Constants.REMOTE_REPOSITORIES)
    return LifecycleMappingService(registry, MetadataSourceLoader(resolver))


def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2))


def run(args) -> int:
    """Execute the selected subcommand and return a process exit code."""
    command = args.COMMAND
    try:
        service = build_service()
        project = load_project(args.POM)

        if command == "sources":
            sources = service.metadata_sources(project)
            _emit([source.to_dict() for source in sources])
        elif command == "mapping":
            mapping = service.lifecycle_mapping(project, getattr(args, "PACKAGING", None))
            _emit(mapping.to_dict() if mapping is not None else None)
        elif command == "configurator":
            execution = MojoExecutionKey.parse(args.EXECUTION)
            sources = service.metadata_sources(project)
            configurator = service.configurator_for(sources, execution)
            _emit(configurator.to_dict() if configurator is not None else None)
    except UnresolvedReferenceError as exc:
        logging.error("%s", exc)
        if exc.kind == UnresolvedReferenceError.REPOSITORY_ERROR:
            return ExitCodes.CONNECTION_ERROR.value
        return ExitCodes.FILE_ERROR.value
    except NotInstalledError as exc:
        logging.error("%s", exc)
        return ExitCodes.CONFIGURATION_ERROR.value
    except LifecycleMappingConfigurationError as exc:
        logging.error("Invalid lifecycle mapping configuration: %s", exc)
        return ExitCodes.CONFIGURATION_ERROR.value
    except ValueError as exc:
        logging.error("%s", exc)
        return ExitCodes.CONFIGURATION_ERROR.value
    except FileNotFoundError as exc:
        logging.error("File not found: %s, aborting", exc)
        return ExitCodes.FILE_ERROR.value
    except OSError as exc:
        logging.error("IO error: %s, aborting", exc)
        return ExitCodes.FILE_ERROR.value
    return ExitCodes.SUCCESS.value


def main(argv=None) -> None:
    """Main function of the program."""
    args = parse_args(argv)
    _setup_logging(args)
    configure(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(
                event="function_entry",
                component="cli",
                action="main",
                command=args.COMMAND,
                registry=Constants.REGISTRY_FILE,
                offline=Constants.OFFLINE,
            )
        )
    sys.exit(run(args))


if __name__ == "__main__":
    main()
