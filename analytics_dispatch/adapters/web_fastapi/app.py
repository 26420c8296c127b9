"""FastAPI adapter — thin translation layer, no business logic."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from analytics_dispatch import create_dispatcher
from analytics_dispatch.core.dispatcher import Dispatcher


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

class EventIn(BaseModel):
    category: str
    name: str
    parameters: dict[str, Any] | None = None


class ViewIn(BaseModel):
    title: str


class UserIn(BaseModel):
    identifier: str
    email: str | None = None
    full_name: str | None = None
    parameters: dict[str, Any] | None = None


class StopUserIn(BaseModel):
    identifier: str | None = None


class OptOutIn(BaseModel):
    opt_out: bool


_ACCEPTED = {"status": "accepted"}


def create_app(dispatcher: Dispatcher | None = None) -> FastAPI:
    dispatcher = dispatcher or create_dispatcher()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        dispatcher.shutdown()

    app = FastAPI(title="Analytics Dispatch API", version="0.1.0", lifespan=lifespan)

    @app.post("/events", status_code=202)
    def track_event(body: EventIn) -> dict:
        dispatcher.track_event(body.category, body.name, body.parameters)
        return _ACCEPTED

    @app.post("/views", status_code=202)
    def track_view(body: ViewIn) -> dict:
        dispatcher.track_view(body.title)
        return _ACCEPTED

    @app.post("/users", status_code=202)
    def track_user(body: UserIn) -> dict:
        dispatcher.track_user(body.identifier, body.email, body.full_name, body.parameters)
        return _ACCEPTED

    @app.post("/users/stop", status_code=202)
    def stop_tracking_user(body: StopUserIn) -> dict:
        dispatcher.stop_tracking_user(body.identifier)
        return _ACCEPTED

    @app.get("/opt-out")
    def get_opt_out() -> dict:
        return {"opt_out": dispatcher.get_opt_out()}

    @app.put("/opt-out")
    def set_opt_out(body: OptOutIn) -> dict:
        dispatcher.set_opt_out(body.opt_out)
        return {"opt_out": dispatcher.get_opt_out()}

    @app.post("/start")
    def start() -> dict:
        dispatcher.start()
        return {"platforms": [s.model_dump(mode="json") for s in dispatcher.platform_statuses()]}

    @app.post("/stop")
    def stop() -> dict:
        dispatcher.stop()
        return {"platforms": [s.model_dump(mode="json") for s in dispatcher.platform_statuses()]}

    @app.get("/platforms")
    def platforms() -> dict:
        return {
            "opt_out": dispatcher.get_opt_out(),
            "platforms": [s.model_dump(mode="json") for s in dispatcher.platform_statuses()],
        }

    @app.get("/health")
    def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    return app


# Module-level instance for ``uvicorn analytics_dispatch.adapters.web_fastapi.app:app``
app = create_app()


def serve() -> None:
    """Entry-point for ``analytics-web`` console script."""
    import uvicorn

    uvicorn.run(
        "analytics_dispatch.adapters.web_fastapi.app:app",
        host="0.0.0.0",
        port=8000,
        log_level="info",
    )
