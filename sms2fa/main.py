from fastapi import FastAPI
from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sms2fa.api.routes import router
from sms2fa.api.admin_routes import router as admin_router
from sms2fa.core.errors import (
    ActionNotActiveError,
    ActionNotSupportedError,
    SessionNotFoundError,
    UserNotFoundError,
)
from sms2fa.observability.logging import log
from sms2fa.settings import settings

app = FastAPI(title="SMS 2FA Enrollment API")

origins = [x.strip() for x in settings.CORS_ORIGINS.split(",") if x.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)
app.include_router(admin_router)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.exception_handler(SessionNotFoundError)
async def session_not_found_handler(request: Request, exc: SessionNotFoundError):
    return JSONResponse(status_code=404, content={"status": "error", "detail": str(exc)})


@app.exception_handler(UserNotFoundError)
async def user_not_found_handler(request: Request, exc: UserNotFoundError):
    return JSONResponse(status_code=404, content={"status": "error", "detail": str(exc)})


@app.exception_handler(ActionNotActiveError)
async def action_not_active_handler(request: Request, exc: ActionNotActiveError):
    log(event="required_action_conflict", path=request.url.path, expected=exc.expected, active=exc.active)
    return JSONResponse(
        status_code=409,
        content={"status": "error", "detail": str(exc), "activeAction": exc.active},
    )


@app.exception_handler(ActionNotSupportedError)
async def action_not_supported_handler(request: Request, exc: ActionNotSupportedError):
    return JSONResponse(status_code=400, content={"status": "error", "detail": str(exc)})
