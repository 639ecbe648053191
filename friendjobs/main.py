import logging
import time
import uuid

from fastapi import FastAPI, Request

from friendjobs.api.errors import register_exception_handlers
from friendjobs.api.v1.router import router as v1_router

logger = logging.getLogger("friendjobs.api")


def create_app() -> FastAPI:
    app = FastAPI(title="friendjobs API")

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """Tag each request with an id (X-Request-ID, or a fresh UUID4) and log it.

        The same id appears in the response header, the error envelope and
        the access log line.
        """

        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        response.headers["X-Request-ID"] = request_id
        logger.info(
            "access request_id=%s method=%s path=%s status=%s duration_ms=%.2f",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        return response

    register_exception_handlers(app)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    app.include_router(v1_router, prefix="/api/v1")
    return app


app = create_app()
