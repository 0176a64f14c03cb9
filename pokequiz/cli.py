"""
Pokequiz CLI - Command-line interface for the quiz server.

Usage:
    pokequiz serve [--host HOST] [--port PORT]    Run the HTTP API
    pokequiz regions                              List selectable regions
"""

import argparse
import logging
import os
import sys

DEFAULT_PORT = 8080


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Pokequiz - Silhouette guessing game server",
        prog="pokequiz",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Bind address")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help=f"Listen port (default: $PORT or {DEFAULT_PORT})",
    )
    serve_parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level",
    )

    # Regions command
    subparsers.add_parser("regions", help="List selectable regions")

    args = parser.parse_args(argv)

    if args.command == "serve":
        cmd_serve(args)
    elif args.command == "regions":
        cmd_regions(args)
    else:
        parser.print_help()
        sys.exit(1)


def resolve_port(cli_port=None, environ=None) -> int:
    """Port from the command line, else $PORT, else 8080."""
    if cli_port is not None:
        return cli_port
    environ = os.environ if environ is None else environ
    value = environ.get("PORT", "")
    if not value:
        return DEFAULT_PORT
    try:
        return int(value)
    except ValueError:
        raise SystemExit(f"Error: invalid PORT value: {value!r}")


def cmd_serve(args):
    """Run the API with uvicorn."""
    import uvicorn

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    port = resolve_port(args.port)
    logging.getLogger(__name__).info("server listening on :%s", port)
    uvicorn.run(
        "pokequiz.api.app:create_app",
        factory=True,
        host=args.host,
        port=port,
        log_level=args.log_level.lower(),
    )


def cmd_regions(args):
    """Print the region table."""
    from .catalog import REGIONS

    for region in REGIONS:
        print(f"{region.key:<8} gen {region.generation}  #{region.first}-{region.last}  {region.label}")


if __name__ == "__main__":
    main()
