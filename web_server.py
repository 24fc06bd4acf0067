#!/usr/bin/env python3
"""
CLI tool to start the SAR downloads FastAPI web server.

Usage:
    python3 web_server.py                    # Start with defaults
    python3 web_server.py --host 0.0.0.0     # Listen on all interfaces
    python3 web_server.py --port 9000        # Use custom port
    python3 web_server.py --reload           # Enable auto-reload for development

Environment Variables:
    Read through AppSettings, from the environment or backend/.env:

    API_TOKEN: Shared bearer token for uploads (empty disables uploads)
    SERVER_HOST: Default host (default: 127.0.0.1)
    SERVER_PORT: Default port (default: 8080)
    SAR_DL_BIN_FOLDER: Artifact root directory (default: bin)
    SAR_DL_DB_URL: Index database URL
    SAR_DL_ENV: Environment (production/development, default: development)
    SAR_DL_LOG_LEVEL: Log level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
"""

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv


def load_env_file() -> None:
    """
    Load environment variables from backend/.env file.

    Variables already set in the environment take precedence. Logging reads
    SAR_DL_ENV and SAR_DL_LOG_LEVEL from the environment.
    """
    env_path = Path(__file__).parent / "backend" / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)


def parse_arguments(settings) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Host and port default to SERVER_HOST and SERVER_PORT from AppSettings.

    Args:
        settings: Loaded AppSettings

    Returns:
        Parsed arguments namespace with host, port, and reload flags
    """
    parser = argparse.ArgumentParser(
        description="Start the SAR downloads web server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start development server with auto-reload
  python3 web_server.py --reload

  # Production configuration
  API_TOKEN=... python3 web_server.py --host 0.0.0.0 --port 8080

Environment Variables:
  API_TOKEN              Upload bearer token
  SERVER_HOST            Default host
  SERVER_PORT            Default port
  SAR_DL_BIN_FOLDER      Artifact root directory
  SAR_DL_DB_URL          Index database URL
  SAR_DL_LOG_LEVEL       Log level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
        """
    )

    parser.add_argument(
        "--host",
        type=str,
        default=settings.server_host,
        help=f"Host to bind the server to (default: {settings.server_host}). "
             "Use 0.0.0.0 to listen on all interfaces."
    )

    parser.add_argument(
        "--port",
        type=int,
        default=settings.server_port,
        help=f"Port to bind the server to (default: {settings.server_port})"
    )

    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development. Not recommended for production."
    )

    return parser.parse_args()


def main() -> None:
    """
    Main entry point for the web server CLI tool.

    Exit Codes:
        0: Server stopped normally
    """
    load_env_file()

    # Ensure the repo root is on sys.path so "backend.src" is importable
    repo_root = str(Path(__file__).parent)
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)

    import uvicorn

    from backend.src.config.settings import get_settings

    settings = get_settings()
    args = parse_arguments(settings)

    print("\nStarting SAR downloads server...")
    print(f"Host: {args.host}")
    print(f"Port: {args.port}")
    print(f"Auto-reload: {'enabled' if args.reload else 'disabled'}")
    print(f"\nAPI documentation: http://{args.host}:{args.port}/docs")
    print(f"Health check: http://{args.host}:{args.port}/health")
    if not settings.upload_configured:
        print("\nWARNING: API_TOKEN is not set, uploads are disabled")
    print("\nPress CTRL+C to stop the server\n")

    try:
        uvicorn.run(
            "backend.src.main:app",
            host=args.host,
            port=args.port,
            reload=args.reload,
            log_level="info",
        )
    except KeyboardInterrupt:
        print("\n\nServer stopped by user (CTRL+C)")
        sys.exit(0)


if __name__ == "__main__":
    main()
