# main.py
import logging

import uvicorn
from fastapi import FastAPI, Request
from starlette.middleware.sessions import SessionMiddleware
from starlette.responses import JSONResponse

from config.settings import settings
from core.errors import (
    AuthenticationFailure,
    HRMError,
    NotFoundError,
    PersistenceFailure,
    StateTransitionError,
    ValidationError,
)
from database.connection import create_all_tables

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("hrm")

# ----- App instance -----
app = FastAPI(title="HRM Payroll API", version="1.0.0")

# ----- Session -----
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET,
    session_cookie=settings.SESSION_COOKIE,
    same_site="lax",
    https_only=False,
    max_age=60 * 60 * 24 * 7,
)

# ----- Error mapping -----
# ลำดับสำคัญ: subclass ต้องมาก่อน base
_HTTP_STATUS = (
    (NotFoundError, 404),
    (ValidationError, 400),
    (AuthenticationFailure, 401),
    (StateTransitionError, 409),
    (PersistenceFailure, 503),
)


def _status_for(exc: HRMError) -> int:
    for cls, code in _HTTP_STATUS:
        if isinstance(exc, cls):
            return code
    return 500


@app.exception_handler(HRMError)
async def hrm_error_handler(request: Request, exc: HRMError):
    code = _status_for(exc)
    if isinstance(exc, AuthenticationFailure):
        logger.info("%s %s -> 401 (reason=%s)", request.method, request.url.path, exc.reason)
        # ไม่เปิดเผยสาเหตุจริงให้ client
        return JSONResponse({"detail": exc.message, "code": exc.status or exc.code}, status_code=code)
    if code >= 500:
        logger.error("%s %s -> %s: %s", request.method, request.url.path, code, exc.message)
    return JSONResponse({"detail": exc.message, "code": exc.code}, status_code=code)


# ----- Routers -----
from modules.security.auth_routes import router as auth_router
from modules.security.password_routes import api_pw
from modules.payroll import routes as payroll_routes
from modules.compensation import routes as compensation_routes

app.include_router(auth_router)
app.include_router(api_pw)
app.include_router(payroll_routes.router)
app.include_router(compensation_routes.api_router)


# ----- Startup -----
@app.on_event("startup")
def on_startup():
    logger.info("Creating all database tables...")
    create_all_tables()
    logger.info("Database tables created successfully.")


# ----- Entrypoint -----
if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=5000, reload=True)
