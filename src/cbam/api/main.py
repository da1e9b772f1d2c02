"""FastAPI application wiring for the CBAM compliance service."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.responses import JSONResponse, Response

from src.cbam.api.routes import calculation_router, validation_router
from src.cbam.settings import configure_logging, get_settings

configure_logging()

app = FastAPI(title=get_settings().app_name)


@app.get("/health")
def health() -> JSONResponse:
    """Simple liveness endpoint used by deployment health checks."""

    return JSONResponse({"status": "ok"})


@app.get("/favicon.ico")
def favicon() -> Response:
    return Response(status_code=204)


app.include_router(validation_router)
app.include_router(calculation_router)


__all__ = ["app", "health"]
