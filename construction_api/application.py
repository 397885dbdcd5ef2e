"""
Application factory for the Construction Project API.

``create_app`` wires settings, logging, the database and the versioned
routes together.  Importing this module has no side effects; the served
instance lives in ``construction_api.main``.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI

from . import entities, models, schemas
from .auth import AuthService, get_auth_service
from .config import Settings
from .database import make_engine, make_session_factory
from .errors import register_exception_handlers
from .handlers import build_crud_router
from .logging_config import setup_logging

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

# AUTH
auth_router = APIRouter(prefix="/authentication", tags=["authentication"])


@auth_router.post("/authenticate", response_model=schemas.AuthResponse)
def authenticate(payload: schemas.LoginRequest, auth_service: AuthService = Depends(get_auth_service)):
    result = auth_service.authenticate(payload.username, payload.password)
    return {"username": result.username, "role": result.role, "token": result.token}


def build_api_router() -> APIRouter:
    router = APIRouter()
    router.include_router(auth_router)
    router.include_router(build_crud_router(entities.PROJECT, "/projects"))
    router.include_router(
        build_crud_router(entities.TASK, "/projects/{projectId}/tasks", item_param="taskId", parent_param="projectId")
    )
    router.include_router(build_crud_router(entities.EMPLOYEE, "/employees"))
    router.include_router(build_crud_router(entities.RESOURCE, "/resources"))
    router.include_router(
        build_crud_router(entities.RESOURCE_USAGE, "/tasks/{taskId}/usages", parent_param="taskId")
    )
    return router


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level, settings.log_file)

    engine = make_engine(settings.database_url)
    models.Base.metadata.create_all(bind=engine)

    app = FastAPI(title=settings.project_name, version=settings.api_version)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)

    app.include_router(build_api_router(), prefix=API_PREFIX)
    register_exception_handlers(app)

    if not settings.secret_key:
        logger.warning("AUTH_SECRET_KEY is not set; authentication and all write endpoints will fail")
    logger.info("%s %s ready", settings.project_name, settings.api_version)
    return app
