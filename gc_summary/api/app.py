"""FastAPI app returning the digest as the response body."""

import threading

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from .. import __version__
from ..core.factory import ComponentFactory
from ..core.logging import get_logger

logger = get_logger(__name__)


def create_app(config, coordinator_factory=None) -> FastAPI:
    """Build the HTTP app.

    Args:
        config: Configuration object
        coordinator_factory: Callable returning a fresh RunCoordinator per request;
            defaults to building one from ``config``
    """
    factory = coordinator_factory or (lambda: ComponentFactory.create_coordinator(config))
    # one run in flight at a time; runs share the store and the watermark
    run_lock = threading.Lock()

    app = FastAPI(
        title="gc-summary",
        description="Digest of GrooveCoaster play changes since the last run",
        version=__version__,
    )

    @app.get("/", response_class=PlainTextResponse)
    def digest() -> PlainTextResponse:
        with run_lock:
            coordinator = factory()
            try:
                result = coordinator.run()
            finally:
                coordinator.source.close()

        if not result.success:
            logger.error(f"Digest request failed: {result.error}")
            return PlainTextResponse(f"Digest run failed: {result.error}\n", status_code=503)

        return PlainTextResponse(result.digest or config.empty_digest_message)

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    return app
