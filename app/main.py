# app/main.py
from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError

from app.config import settings
from app.database import Base, engine
from app.routers import auth, admin
from app.utils.access import AccessDecision, perimeter_decision

import time
import logging
from fastapi import Request
from app.logging_config import setup_logging


setup_logging()
logger = logging.getLogger("app")


# create tables if missing
Base.metadata.create_all(bind=engine)

app = FastAPI(title="AbiNote Backend", version="1.0.0")


@app.middleware("http")
async def session_perimeter(request: Request, call_next):
    # presence check only; role and status are checked by the route dependencies
    has_cookie = bool(request.cookies.get(settings.SESSION_COOKIE_NAME))
    if perimeter_decision(request.url.path, has_cookie) == AccessDecision.ALLOW:
        return await call_next(request)

    if request.url.path.startswith("/api/"):
        return JSONResponse(status_code=401, content={"detail": "Not authenticated"})
    return RedirectResponse(f"{settings.FRONTEND_BASE_URL.rstrip('/')}/auth/login", status_code=307)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    try:
        response = await call_next(request)
        ms = int((time.time() - start) * 1000)
        logger.info("%s %s -> %s (%dms)", request.method, request.url.path, response.status_code, ms)
        return response
    except Exception:
        ms = int((time.time() - start) * 1000)
        logger.exception("Unhandled error %s %s (%dms)", request.method, request.url.path, ms)
        raise


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid input", "detail": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Storage error %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Routers
app.include_router(auth.router)
app.include_router(admin.router)

@app.get("/")
def root():
    return {"message": "AbiNote backend is running!"}
