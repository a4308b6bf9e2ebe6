"""FastAPI application: a single route that anonymizes tagged events."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool

from anonymousface.context import AppContext
from anonymousface.errors import AnonymousFaceError
from anonymousface.remote import Fetcher, ImageFetcher, Publisher, VoidCatPublisher
from anonymousface.workflow import Workflow

VERSION = "0.1.0"


async def anonymousface_error_handler(
    request: Request, exc: AnonymousFaceError
) -> PlainTextResponse:
    """Report a failed request as plain text with the error's status."""
    return PlainTextResponse(exc.message, status_code=exc.status_code)


def create_app(
    context: AppContext,
    fetcher: Fetcher | None = None,
    publisher: Publisher | None = None,
) -> FastAPI:
    """Build the app around the startup singletons in ``context``."""
    fetcher = fetcher or ImageFetcher()
    publisher = publisher or VoidCatPublisher()

    app = FastAPI(
        title="anonymousface",
        version=VERSION,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.add_exception_handler(AnonymousFaceError, anonymousface_error_handler)

    @app.get("/", response_class=PlainTextResponse)
    async def usage() -> str:
        """Static usage text."""
        return context.usage

    @app.post("/")
    async def anonymize(request: Request) -> JSONResponse:
        """Mask faces in the image referenced by the posted event and reply."""
        body = await request.body()
        workflow = Workflow(context, fetcher, publisher)
        # The pipeline blocks; give each request its own worker thread
        reply = await run_in_threadpool(workflow.run, body)
        return JSONResponse(reply.to_dict())

    return app
