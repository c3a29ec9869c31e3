from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.adapters.api.controllers.journeys import router as journeys_router
from src.adapters.api.controllers.stops import router as stops_router
from src.adapters.config import PlannerRuntimeConfig

app = FastAPI(title="Journey Planner")
app.include_router(journeys_router)
app.include_router(stops_router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Answer planner and upstream failures with a JSON 500.

    RuntimeError and ValueError messages (missing configuration, bad operator
    payloads) are shown to the client; other messages only when
    JOURNEY_PLANNER_REVEAL_ERRORS is set.
    """

    logging.getLogger("uvicorn.error").exception(
        "Unhandled error on %s %s", request.method, request.url.path
    )

    reveal = PlannerRuntimeConfig.from_env().reveal_errors
    if reveal or isinstance(exc, (RuntimeError, ValueError)):
        detail = str(exc) or exc.__class__.__name__
    else:
        detail = "Internal Server Error"

    return JSONResponse(status_code=500, content={"detail": detail})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
