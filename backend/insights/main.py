import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from insights.config import CORS_ORIGINS
from insights.errors import InsightsError
from insights.logging_setup import configure_logging
from insights.logic.submissions import clear_form
from insights.routers import auth, dashboard, form, stores, surveys, users
from insights.services.app_store import get_app_store
from insights.services.auth import Session, get_auth

logger = logging.getLogger(__name__)


def _drop_draft_on_sign_out(event: str, session: Session) -> None:
    if event == "SIGNED_OUT":
        get_app_store().run(lambda s: (clear_form(s, session.token), None))


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    auth_service = get_auth()
    auth_service.ensure_admin()
    unsubscribe = auth_service.subscribe(_drop_draft_on_sign_out)
    try:
        yield
    finally:
        unsubscribe()


async def _insights_error(request: Request, exc: InsightsError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def create_app() -> FastAPI:
    app = FastAPI(title="Conect Insights", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True, allow_methods=["*"], allow_headers=["*"],
    )
    app.add_exception_handler(InsightsError, _insights_error)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(auth.router)
    app.include_router(form.router)
    app.include_router(dashboard.router)
    app.include_router(surveys.router)
    app.include_router(stores.router)
    app.include_router(users.router)
    return app


app = create_app()
