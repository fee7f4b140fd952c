"""
Deposit Back Office FastAPI application.

This is the entry point for the application.
All routers and error handlers are registered here.
"""

import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from backoffice.config import get_settings
from backoffice.exceptions import BackOfficeError
from backoffice.api.activities import router as activities_router
from backoffice.api.auth import router as auth_router
from backoffice.api.banks import router as banks_router
from backoffice.api.dashboard import router as dashboard_router
from backoffice.api.deposits import bank_deposits_router, deposits_router
from backoffice.api.health import router as health_router
from backoffice.api.otp import router as otp_router
from backoffice.api.roles import router as roles_router
from backoffice.api.staff import router as staff_router

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Role-based back office for deposit and bank deposit records",
)


@app.exception_handler(BackOfficeError)
async def back_office_error_handler(request: Request, exc: BackOfficeError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# Register routers
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(otp_router)
app.include_router(deposits_router)
app.include_router(bank_deposits_router)
app.include_router(staff_router)
app.include_router(activities_router)
app.include_router(roles_router)
app.include_router(banks_router)
app.include_router(dashboard_router)


if __name__ == "__main__":
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
