import argparse
import os
import sys
from typing import List, Optional

import uvicorn

from .config import get_settings
from .logger import configure_logging


def find_app_string(file_path: str = "app.py") -> str:
    """
    Formats the file path to Uvicorn convention: 'module:app'.

    Assumes that the application object is named 'app' inside the file.
    Args:
        file_path: Path to the file containing the App instance.
    """
    module_name = os.path.splitext(os.path.basename(file_path))[0]
    return f"{module_name}:app"


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="interpose",
        description="Serve an interpose middleware stack with uvicorn.",
        epilog="Example: interpose dev --app-file main.py",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- Command 'dev' (Development Mode) ---
    dev_parser = subparsers.add_parser(
        "dev",
        help="Run the application in development mode with auto-reload.",
        description="Binds to 127.0.0.1 (localhost) and enables auto-reload.",
    )
    dev_parser.add_argument(
        "--reload",
        action=argparse.BooleanOptionalAction,
        default=settings.reload,
        help="Enable auto-reload on code changes.",
    )

    # --- Command 'run' (Production Mode) ---
    subparsers.add_parser(
        "run",
        help="Run the application in production mode.",
        description="Binds to 0.0.0.0 (public) and disables auto-reload.",
    )

    for sub in subparsers.choices.values():
        sub.add_argument(
            "--app-file",
            type=str,
            default="app.py",
            help="Path to the file containing the App instance (e.g., main.py).",
        )
        sub.add_argument(
            "--port",
            type=int,
            default=settings.port,
            help="The port to listen on.",
        )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the interpose CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()
    log = configure_logging(settings)

    # Make the application module importable, also for the reload subprocess
    app_file_path = os.path.abspath(args.app_file)
    app_dir = os.path.dirname(app_file_path)
    if app_dir not in sys.path:
        sys.path.insert(0, app_dir)

    app_string = find_app_string(args.app_file)

    reload_dirs: Optional[List[str]] = None
    if args.command == "dev":
        host = "127.0.0.1"
        reload = args.reload
        reload_dirs = [app_dir]
        log_level = settings.log_level
    else:
        host = "0.0.0.0"
        reload = False
        log_level = "warning"

    log.info("Running %s in %s mode on http://%s:%d", app_string, args.command, host, args.port)

    try:
        uvicorn.run(
            app_string,
            host=host,
            port=args.port,
            reload=reload,
            reload_dirs=reload_dirs,
            log_level=log_level,
            log_config=None,
        )
    except Exception:
        log.exception(
            "The server failed to start or find the application in '%s'. "
            "Ensure that the file defines 'app = App()'.",
            args.app_file,
        )
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
