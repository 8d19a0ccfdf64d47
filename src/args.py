"""Argument parsing functionality for pkgfetch."""

import argparse
from constants import Constants


def _add_common_args(parser):
    """Flags shared by every subcommand."""
    parser.add_argument("-m", "--manifest",
                        dest="MANIFEST",
                        help=f"Path to the manifest (default: {Constants.MANIFEST_FILE})",
                        action="store", type=str)
    parser.add_argument("--registry",
                        dest="REGISTRY",
                        help="Registry base URL (default: npm public registry)",
                        action="store", type=str)
    parser.add_argument("--timeout",
                        dest="TIMEOUT",
                        help="HTTP request timeout in seconds",
                        action="store", type=float)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store", type=str)
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


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="pkgfetch",
        description="pkgfetch - resolve and install npm package dependencies",
        add_help=True,
    )
    sub = parser.add_subparsers(dest="COMMAND", metavar="command")
    sub.required = True

    install = sub.add_parser("install", help="Resolve the manifest and install all dependencies")
    _add_common_args(install)
    install.add_argument("-s", "--store",
                         dest="STORE",
                         help=f"Package store directory (default: {Constants.STORE_DIR})",
                         action="store", type=str)

    add = sub.add_parser("add", help="Add a dependency to the manifest")
    _add_common_args(add)
    add.add_argument("PACKAGE",
                     help="Package as name or name@version",
                     type=str)

    return parser.parse_args(argv)
