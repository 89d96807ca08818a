import uvicorn
import time
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from infer_bridge.api.projects import router as projects_router
from infer_bridge.api.analysis import router as analysis_router
from infer_bridge.api.configuration import router as configuration_router
from infer_bridge.api.status import router as status_router
from infer_bridge.services.host import InProcessHost
from infer_bridge.state.project_registry import ProjectRegistry
from infer_bridge.utils.logging_config import setup_logging

# Initialize enhanced logging
setup_logging()
logger = logging.getLogger("main")


# ---------------------------------------------------------------------------
# Logging Middleware
# ---------------------------------------------------------------------------
class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        client_host = request.client.host if request.client else "unknown"
        logger.info("Incoming: %s %s from %s", request.method, request.url.path, client_host)

        try:
            response = await call_next(request)
            process_time = (time.time() - start_time) * 1000
            logger.info(
                "Outgoing: %s %s - Status: %d - Time: %.2fms",
                request.method, request.url.path, response.status_code, process_time,
            )
            return response
        except Exception as e:
            logger.error("Request failed: %s %s - Error: %s", request.method, request.url.path, e)
            raise


def create_app(host: Optional[InProcessHost] = None) -> FastAPI:
    """Build the service with its own host worker pool and project registry."""
    host = host or InProcessHost()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        logger.info("Shutting down host worker pool")
        host.shutdown(wait=False)

    app = FastAPI(title="Infer Bridge API", lifespan=lifespan)
    app.state.host = host
    app.state.registry = ProjectRegistry(host)
    app.add_middleware(LoggingMiddleware)

    # Health endpoint
    @app.get("/health")
    async def health_check():
        return {"status": "ok"}

    # Register routers
    app.include_router(projects_router)
    app.include_router(analysis_router)
    app.include_router(configuration_router)
    app.include_router(status_router, tags=["Status"])
    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=True)
