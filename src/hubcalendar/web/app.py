"""FastAPI application serving the calendar feed."""

import logging
from typing import Callable, Optional

from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse, Response

from hubcalendar import __version__
from hubcalendar.config.constants import CORS_HEADERS, FEED_CONTENT_TYPE, FEED_FILENAME
from hubcalendar.config.settings import FeedSettings, load_settings
from hubcalendar.core.event_model import FeedRequest
from hubcalendar.core.ics_builder import build_feed
from hubcalendar.storage.event_store import EventStore

logger = logging.getLogger(__name__)

StoreFactory = Callable[[], EventStore]


def create_app(
    settings: Optional[FeedSettings] = None,
    store_factory: Optional[StoreFactory] = None,
) -> FastAPI:
    """Create the feed application.

    Args:
        settings: Feed settings; loaded from the environment when omitted.
        store_factory: Callable returning a fresh store per request.

    Returns:
        The configured FastAPI app.
    """
    if settings is None:
        settings = load_settings()
    if store_factory is None:
        def store_factory() -> EventStore:
            return EventStore.from_settings(settings)

    app = FastAPI(
        title="Hub de Comunidades Calendar Feed",
        version=__version__,
        docs_url=None,
    )

    @app.get("/")
    def root():
        return {"service": app.title, "status": "running"}

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.options("/calendar-feed")
    def calendar_feed_preflight():
        return Response(status_code=200, headers=dict(CORS_HEADERS))

    @app.api_route("/calendar-feed", methods=["GET", "POST"])
    def calendar_feed(
        community: Optional[str] = Query(default=None, description="Organizer id"),
        category: Optional[str] = Query(default=None, description="Event category"),
        sources: Optional[str] = Query(default=None, description="Comma-separated source ids"),
        user: Optional[str] = Query(default=None, description="User whose preferences apply"),
        internal: Optional[str] = Query(default=None, description='"false" drops internal events'),
    ):
        """Render approved upcoming events as an .ics download."""
        request = FeedRequest.from_params(
            community=community,
            category=category,
            sources=sources,
            user=user,
            internal=internal,
        )
        try:
            with store_factory() as store:
                result = build_feed(request, store, settings)
        except Exception as e:
            logger.exception("Error generating calendar")
            return JSONResponse(
                status_code=500,
                content={"error": str(e)},
                headers=dict(CORS_HEADERS),
            )

        headers = dict(CORS_HEADERS)
        headers["Content-Disposition"] = f'attachment; filename="{FEED_FILENAME}"'
        return Response(
            content=result.content.encode("utf-8"),
            media_type=FEED_CONTENT_TYPE,
            headers=headers,
        )

    return app
