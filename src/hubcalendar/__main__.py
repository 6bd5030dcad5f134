"""Entry point for running hubcalendar as a module.

Usage:
    python -m hubcalendar serve [--host HOST] [--port PORT]
    python -m hubcalendar export [--sources A,B] [--no-internal] [-o feed.ics]
"""

import argparse
import logging
import sys

from hubcalendar.config.settings import load_settings
from hubcalendar.exceptions.errors import HubCalendarError

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hubcalendar",
        description="Hub de Comunidades calendar feed",
    )
    parser.add_argument("--env-file", help="Path to a .env file to load")
    subparsers = parser.add_subparsers(dest="command")

    serve = subparsers.add_parser("serve", help="Run the HTTP feed service")
    serve.add_argument("--host", help="Bind address (default from HUBCAL_HOST)")
    serve.add_argument("--port", type=int, help="Bind port (default from HUBCAL_PORT)")

    export = subparsers.add_parser("export", help="Write the feed to a file once")
    export.add_argument("--community", help="Organizer id to filter on")
    export.add_argument("--category", help="Category to filter on")
    export.add_argument("--sources", help="Comma-separated source ids")
    export.add_argument("--user", help="User id whose preferences apply")
    export.add_argument("--no-internal", action="store_true",
                        help="Drop events without a source when filtering by source")
    export.add_argument("-o", "--output", help="Output file (default: stdout)")
    return parser


def _serve(settings, args) -> int:
    import uvicorn
    from hubcalendar.web.app import create_app

    app = create_app(settings)
    uvicorn.run(
        app,
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


def _export(settings, args) -> int:
    from hubcalendar.core.event_model import FeedRequest
    from hubcalendar.core.ics_builder import build_feed
    from hubcalendar.storage.event_store import EventStore

    request = FeedRequest.from_params(
        community=args.community,
        category=args.category,
        sources=args.sources,
        user=args.user,
        internal="false" if args.no_internal else None,
    )
    with EventStore.from_settings(settings) as store:
        result = build_feed(request, store, settings)

    if args.output:
        # newline="" keeps the CRLF terminators intact
        with open(args.output, "w", encoding="utf-8", newline="") as fh:
            fh.write(result.content)
        logger.info("Wrote %d event(s) to %s", result.event_count, args.output)
    else:
        sys.stdout.write(result.content)
    return 0


def main(argv=None) -> int:
    """Main entry point for the application."""
    args = _build_parser().parse_args(argv)
    settings = load_settings(args.env_file)

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.command == "export":
        try:
            return _export(settings, args)
        except HubCalendarError as e:
            logger.error("Export failed: %s", e)
            return 1
    return _serve(settings, args)


if __name__ == "__main__":
    sys.exit(main())
