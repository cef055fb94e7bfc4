"""Main entry point."""

import sys

from termail.core.gmail import build_provider
from termail.tui.app import InboxApp
from termail.utils.config_manager import ConfigManager
from termail.utils.console import print_error
from termail.utils.errors import (
    ConfigurationError,
    ErrorHandler,
    FileSystemError,
    StartupFailure,
    format_error_message,
)
from termail.utils.logging import get_logger, init_logging

logger = get_logger(__name__)


def main() -> int:
    """Start termail.

    Returns:
        Exit code
    """
    if len(sys.argv) > 1:
        print_error(f"termail takes no arguments (got: {' '.join(sys.argv[1:])})")
        return 2

    try:
        config = ConfigManager().config
    except (ConfigurationError, FileSystemError) as e:
        print_error(f"Configuration error: {format_error_message(e)}")
        return 1

    try:
        log_manager = init_logging(config.logging.log_level)
    except FileSystemError as e:
        print_error(f"Logging error: {format_error_message(e)}")
        return 1

    try:
        provider = build_provider(config)
    except StartupFailure as e:
        with log_manager.console_muted():
            ErrorHandler.handle(e, "startup", log_traceback=False)
        print_error(format_error_message(e))
        return 1

    try:
        app = InboxApp(provider, config)
        with log_manager.console_muted():
            app.run()
    except KeyboardInterrupt:
        return 130  # Standard SIGINT exit code

    logger.info(f"Exited with code {app.return_code}")
    return app.return_code or 0


if __name__ == "__main__":
    sys.exit(main())
