from __future__ import annotations

import os

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

from .. import __version__
from ..features.session import RoomManager, create_room_routers


def create_app(manager: RoomManager | None = None) -> FastAPI:
    """Build the HTTP application around ``manager`` (a fresh one by default)."""

    app = FastAPI(title="Infinicraft")
    app.state.manager = manager if manager is not None else RoomManager()
    rooms, admin = create_room_routers(app.state.manager)

    @app.get("/healthz")
    def healthz() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(rooms)
    app.include_router(admin)

    def _custom_openapi() -> dict[str, object]:  # pragma: no cover - exercised via docs
        if app.openapi_schema:
            return app.openapi_schema
        schema = get_openapi(
            title=app.title,
            version=__version__,
            description=app.description,
            routes=app.routes,
        )
        app.openapi_schema = schema
        return schema

    app.openapi = _custom_openapi  # type: ignore[method-assign]
    return app


app = create_app()


def main(host: str | None = None, port: int | None = None) -> None:  # pragma: no cover - runner
    import uvicorn

    host = host or os.environ.get("BIND", "0.0.0.0")
    port = port or int(os.environ.get("PORT", "8000"))
    uvicorn.run(app, host=host, port=port, factory=False)


if __name__ == "__main__":  # pragma: no cover
    main()
