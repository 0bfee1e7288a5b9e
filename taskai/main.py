from fastapi import FastAPI

from taskai.api.routers.auth import router as auth_router
from taskai.api.routers.commitments import router as commitments_router
from taskai.api.routers.framing import router as framing_router
from taskai.api.routers.reminders import router as reminders_router
from taskai.api.routers.templates import router as templates_router


def create_app() -> FastAPI:
    app = FastAPI(title="TaskAI Commitments API")

    app.include_router(auth_router)
    app.include_router(commitments_router)
    app.include_router(reminders_router)
    app.include_router(templates_router)
    app.include_router(framing_router)

    @app.get("/health")
    def health():
        return {"ok": True}

    return app
