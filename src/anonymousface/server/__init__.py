"""HTTP server for anonymizing faces in Nostr-posted images."""


def main() -> None:
    """CLI entry point for the HTTP server."""
    import logging
    import sys

    import uvicorn

    from anonymousface.config import HOST, LOG_LEVEL, PORT
    from anonymousface.context import build_context
    from anonymousface.errors import AnonymousFaceError
    from anonymousface.log import configure_logging
    from anonymousface.server.app import create_app

    configure_logging(LOG_LEVEL)
    logger = logging.getLogger(__name__)

    try:
        context = build_context()
    except AnonymousFaceError as exc:
        logger.critical("Startup failed: %s", exc)
        sys.exit(1)

    app = create_app(context)
    uvicorn.run(app, host=HOST, port=PORT, log_config=None)
