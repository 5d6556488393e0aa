"""FastAPI application for the Trainer Portal backend.

Operational behaviour:
- Bearer-token authentication with company-scoped permissions
- Per-token rate limiting
- Request-id propagation and structured access logs
- Storage failures surface as 500 with a short message, never a stack trace
"""

from __future__ import annotations

import json
import logging
import os
import time
import uuid
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from portal.api.router import router as api_router
import portal.models as _models  # noqa: F401  (register all ORM models deterministically)


logger = logging.getLogger("portal")
logger.setLevel(logging.INFO)

CORS_ORIGINS_ENV = "PORTAL_CORS_ORIGINS"


def _cors_origins() -> list[str]:
    raw = os.environ.get(CORS_ORIGINS_ENV, "http://localhost:3000,http://127.0.0.1:3000")
    return [o.strip() for o in raw.split(",") if o.strip()]


def create_app() -> FastAPI:
    app = FastAPI(
        title="Trainer Portal API",
        version="1.0.0",
        openapi_url="/openapi.json",
        docs_url=None,
        redoc_url=None,
        description="Trainers, training companies and their users.",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    @app.middleware("http")
    async def request_id_and_access_log(request: Request, call_next: Callable):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        start = time.time()
        try:
            response = await call_next(request)
        except SQLAlchemyError:
            logger.exception("Storage error", extra={"request_id": request_id})
            response = JSONResponse(
                status_code=500,
                content={"detail": "Storage error."},
            )
        except Exception:  # noqa: BLE001
            logger.exception("Unhandled error", extra={"request_id": request_id})
            response = JSONResponse(
                status_code=500,
                content={"detail": "Internal error."},
            )

        duration_ms = int((time.time() - start) * 1000)
        response.headers["x-request-id"] = request_id

        # No headers or bodies: tokens and personal data stay out of the logs.
        logger.info(
            json.dumps(
                {
                    "event": "access",
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": getattr(response, "status_code", None),
                    "duration_ms": duration_ms,
                }
            )
        )
        return response

    return app


app = create_app()
