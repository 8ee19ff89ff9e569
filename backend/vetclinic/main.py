"""Module: main."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from vetclinic.api.v1.api import api_router
from vetclinic.core.config import settings
from vetclinic.core.errors import ClinicError
from vetclinic.core.log_config import setup_logging
from vetclinic.db.init_db import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Configure logging and make sure the schema exists."""
    setup_logging()
    init_db()
    logger.info("Vet clinic API started")
    yield


app = FastAPI(title="Vet Clinic API", version="0.1.0", lifespan=lifespan)

app.include_router(api_router, prefix="/api/v1")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Domain errors carry their own status; the body shape matches HTTPException.
@app.exception_handler(ClinicError)
async def clinic_error_handler(request: Request, exc: ClinicError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("vetclinic.main:app", host="0.0.0.0", port=8000, reload=True)
