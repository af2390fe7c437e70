from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from dashboard_api.core.config import settings
from dashboard_api.core.database import engine, Base
from dashboard_api.core.errors import GatewayError, InvalidRequest
from dashboard_api.api.responses import error_response
from dashboard_api.api.v1.router import api_router
import dashboard_api.models  # noqa: F401  registers tables on Base
import logging
import os

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def get_version() -> str:
    """Read version from VERSION file, fallback to default if not found."""
    version_file = os.path.join(os.path.dirname(os.path.dirname(__file__)), "VERSION")
    try:
        if os.path.exists(version_file):
            with open(version_file, "r") as f:
                version = f.read().strip()
                if version:
                    return version
    except Exception as e:
        logger.warning(f"Could not read VERSION file: {e}")
    # Fallback to default version
    return "1.0.0"


# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Marketing Dashboard API",
    version=get_version(),
    debug=settings.debug,
    redirect_slashes=False,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError):
    logger.warning(f"{request.method} {request.url.path}: {exc.code} ({exc.status_code}) - {exc.message}")
    return error_response(exc)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    error = InvalidRequest("Invalid JSON body", details=jsonable_errors(exc))
    return error_response(error)


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg")}
        for err in exc.errors()
    ]


app.include_router(api_router, prefix=settings.functions_prefix)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
