"""
Point d'entrée principal de l'API du registre des passeports.
Démarrage : uvicorn passport_registry.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

import passport_registry.models  # noqa: F401 (enregistre tous les modèles dans Base.metadata avant les routers)
from passport_registry.config import settings
from passport_registry.errors import AppError, ValidationError
from passport_registry.routers import activity_logs, admins, groups, people, public
from passport_registry.scheduler import start_scheduler, stop_scheduler
from passport_registry.services.asset_service import UPLOADS_URL_PREFIX, ensure_upload_dirs

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Cycle de vie de l'application : démarre et arrête le scheduler APScheduler."""
    if settings.SCHEDULER_ENABLED:
        start_scheduler()
    yield
    stop_scheduler()


app = FastAPI(
    title="Passport Registry API",
    description="Registre administratif des passeports : groupes, QR codes, expiration automatique et journal d'activité",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=settings.CORS_ORIGIN_REGEX,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)


@app.middleware("http")
async def uploads_cors(request: Request, call_next):
    """Photos et QR codes lisibles depuis n'importe quelle origine."""
    response = await call_next(request)
    if request.url.path.startswith(UPLOADS_URL_PREFIX + "/"):
        response.headers["Access-Control-Allow-Origin"] = "*"
    return response


# Le router public est enregistré en premier : il ne passe jamais par l'authentification
app.include_router(public.router)
app.include_router(admins.router)
app.include_router(groups.router)
app.include_router(people.router)
app.include_router(activity_logs.router)

ensure_upload_dirs()
app.mount(UPLOADS_URL_PREFIX, StaticFiles(directory=settings.UPLOADS_DIR), name="uploads")


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Traduit les erreurs métier en réponse HTTP {"detail": ...}."""
    if exc.status_code >= 500:
        logger.error("%s %s → %d : %s", request.method, request.url.path, exc.status_code, exc.__cause__ or exc)
    content = {"detail": exc.message}
    if isinstance(exc, ValidationError) and exc.errors:
        content["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Intercepte toutes les exceptions non gérées pour garantir que la réponse 500
    passe bien par CORSMiddleware et ne divulgue aucun détail interne au client.
    """
    logger.error("Exception non gérée : %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Внутренняя ошибка сервера."},
    )


@app.get("/api/health", tags=["Santé"])
def health_check():
    """Vérifie que l'API est opérationnelle."""
    return {"status": "ok", "service": "Passport Registry API", "version": "0.1.0"}
