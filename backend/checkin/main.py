import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from checkin.api.routers import auth, subjects, tokens, checkins, geofences, alerts, logs, schedules
from checkin.config import Settings
from checkin.db import Database
from checkin.errors import CheckinError
from checkin.logging_config import setup_logging
from checkin.services.geocoding.reverse import ReverseGeocoder

log = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "invalid request"


def create_app(settings: Settings | None = None, geocoder=None, configure_logging: bool = True) -> FastAPI:
    """Build the API with its own database handle and geocoder.

    Run with ``uvicorn checkin.main:create_app --factory``.
    """
    settings = settings or Settings()
    if configure_logging:
        setup_logging(settings.log_level, settings.log_to_file)

    app = FastAPI(title="Check-in Links API", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.db = Database(settings.database_url)
    app.state.db.init_db()
    if geocoder is None:
        geocoder = ReverseGeocoder(
            settings.geocoder_user_agent,
            timeout=settings.geocoder_timeout,
            enabled=settings.geocoder_enabled,
        )
    app.state.geocoder = geocoder

    @app.on_event("shutdown")
    def on_shutdown():
        app.state.db.dispose()

    @app.exception_handler(CheckinError)
    def handle_checkin_error(request: Request, exc: CheckinError):
        if exc.status_code >= 500:
            log.error("%s %s -> %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    def handle_request_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    @app.get("/health")
    def health():
        return {"ok": True}

    app.include_router(auth.router,      prefix="/auth",      tags=["auth"])
    app.include_router(subjects.router,  prefix="/subjects",  tags=["subjects"])
    app.include_router(tokens.router,    prefix="/tokens",    tags=["tokens"])
    app.include_router(checkins.router,  prefix="/checkin",   tags=["checkin"])
    app.include_router(geofences.router, prefix="/geofences", tags=["geofences"])
    app.include_router(alerts.router,    prefix="/alerts",    tags=["alerts"])
    app.include_router(logs.router,      prefix="/logs",      tags=["logs"])
    app.include_router(schedules.router, prefix="/schedules", tags=["schedules"])

    return app
