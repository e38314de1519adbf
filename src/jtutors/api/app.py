from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jtutors.api.admin import router as admin_router
from jtutors.api.bookings import router as bookings_router
from jtutors.api.routes import router as api_router
from jtutors.api.tutor import router as tutor_router
from jtutors.api.withdrawals import router as withdrawals_router
from jtutors.config import get_settings
from jtutors.db.init import init_database
from jtutors.logging_config import configure_logging


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging()

    app = FastAPI(title=settings.app_name)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    def _startup() -> None:
        init_database()

    @app.get("/health")
    def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    app.include_router(api_router)
    app.include_router(tutor_router)
    app.include_router(admin_router)
    app.include_router(bookings_router)
    app.include_router(withdrawals_router)
    return app
