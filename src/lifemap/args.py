"""Argument parsing for the lifemap CLI."""

import argparse


def _add_pom(parser):
    parser.add_argument("--pom",
                        dest="POM",
                        help="Path to pom.xml or the directory containing it",
                        action="store",
                        type=str,
                        default=".")


def build_parser():
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="lifemap",
        description="Resolve lifecycle mappings and project configurators for Maven projects",
        add_help=True,
    )

    parser.add_argument("--registry",
                        dest="REGISTRY",
                        help="Path to the capability registry YAML file",
                        action="store",
                        type=str)
    parser.add_argument("--local-repository",
                        dest="LOCAL_REPOSITORY",
                        help="Local Maven repository directory (default: ~/.m2/repository)",
                        action="store",
                        type=str)
    parser.add_argument("--repository",
                        dest="REPOSITORIES",
                        help="Remote repository URL (can be used multiple times)",
                        action="append",
                        type=str,
                        default=[])
    parser.add_argument("--offline",
                        dest="OFFLINE",
                        help="Only use the local repository",
                        action="store_true")
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML)",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    subparsers = parser.add_subparsers(dest="COMMAND", metavar="command")
    subparsers.required = True

    sources = subparsers.add_parser("sources", help="Print the resolved metadata source override list")
    _add_pom(sources)

    mapping = subparsers.add_parser("mapping", help="Print the lifecycle mapping for the project")
    _add_pom(mapping)
    mapping.add_argument("--packaging",
                         dest="PACKAGING",
                         help="Packaging type (default: the project's packaging)",
                         action="store",
                         type=str)

    configurator = subparsers.add_parser("configurator",
                                         help="Print the project configurator for one mojo execution")
    _add_pom(configurator)
    configurator.add_argument("--execution",
                              dest="EXECUTION",
                              help="Mojo execution as groupId:artifactId:version:goal",
                              action="store",
                              type=str,
                              required=True)

    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
