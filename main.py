# main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
from config import CORS_ORIGINS, LOG_LEVEL
from db import init_db
from errors import AppError

# your routers (each defines and exports a `router` instance)
from routers.auth import router as auth_router, oauth_router
from routers.user_actions import router as user_actions_router
from routers.recipes import router as recipes_router
from routers.admin import router as admin_router
from routers.chat import router as chat_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def warn_insecure_defaults():
    for name in config.insecure_defaults():
        logger.warning("[config] %s is not set, using the development default", name)


@asynccontextmanager
async def lifespan(app: FastAPI):
    warn_insecure_defaults()
    # Initialize DB once at startup
    init_db()
    yield


app = FastAPI(title="CookMate API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


@app.exception_handler(AppError)
async def handle_app_error(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("[error] %s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return _failure(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ())[1:]) or "body"
    logger.info("[validation] %s %s: %s", request.method, request.url.path, errors)
    return _failure(400, f"Invalid value for {field}: {first.get('msg', 'invalid input')}")


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException):
    return _failure(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def handle_any_error(request: Request, exc: Exception):
    logger.exception("[error] unhandled %s %s", request.method, request.url.path)
    return _failure(500, "Server error")


# mount all of your routers
app.include_router(auth_router)             # /auth/*
app.include_router(oauth_router)            # /oauth2callback
app.include_router(user_actions_router)     # /recipes/saved, /recipes/{id}/save, /recipes/{id}/purchase
app.include_router(recipes_router)          # /recipes, /recipes/leaderboard, /recipes/{id}/like ...
app.include_router(admin_router)            # /admin/*
app.include_router(chat_router)             # /ai/chat


# simple health-check
@app.get("/")
async def root():
    return {"success": True, "message": "CookMate API is running!"}
