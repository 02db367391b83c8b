from fastapi import FastAPI

from idrepo.config import Settings, settings
from idrepo.handlers import register_error_handlers
from idrepo.logging import get_logger
from idrepo.middleware import RequestContextMiddleware
from idrepo.services.translator import ExceptionTranslator

logger = get_logger(__name__)


def create_app(app_settings: Settings = settings) -> FastAPI:
    """Build the application with error handling wired in.

    Identity routers are included by the deploying service; every exception
    they raise is answered with the standard error envelope.
    """
    app = FastAPI(title="ID Repository", version=app_settings.app_version)
    app.add_middleware(RequestContextMiddleware)
    register_error_handlers(app, ExceptionTranslator.from_settings(app_settings))

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Liveness probe."""
        return {"status": "ok"}

    logger.info("app_created", version=app_settings.app_version)
    return app


app = create_app()
