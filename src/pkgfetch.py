"""pkgfetch - resolve a package.json's dependencies and install them.

    Returns:
        int: Exit code
"""
import logging
import os

from constants import Constants
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from args import parse_args
from cli_config import apply_config


def _setup_logging(args) -> None:
    """Configure logging from --loglevel and --logfile."""
    if getattr(args, "LOG_LEVEL", None):
        os.environ[Constants.ENV_LOG_LEVEL] = str(args.LOG_LEVEL).upper()
    configure_logging()

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logging.getLogger().addHandler(file_handler)
        logging.getLogger(__name__).info("Logging to file: %s", log_file)


def main(argv=None):
    """Main function of the program."""
    logger = logging.getLogger(__name__)

    args = parse_args(argv)
    _setup_logging(args)
    apply_config(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action=args.COMMAND)
        )

    # Lazy imports keep --help free of aiohttp startup cost
    if args.COMMAND == "install":
        from cli_install import run_install  # pylint: disable=import-outside-toplevel
        run_install(args)
    elif args.COMMAND == "add":
        from cli_add import run_add  # pylint: disable=import-outside-toplevel
        run_add(args)


if __name__ == "__main__":
    main()
