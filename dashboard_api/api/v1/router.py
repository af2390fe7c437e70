from fastapi import APIRouter
from dashboard_api.api.responses import preflight_response
from dashboard_api.api.v1.routes import n8n_proxy, n8n_config, n8n_diagnostics

api_router = APIRouter()

api_router.include_router(n8n_proxy.router, tags=["n8n-proxy"])
api_router.include_router(n8n_config.router, tags=["n8n-config"])
api_router.include_router(n8n_diagnostics.router, tags=["n8n-diagnostics"])


@api_router.options("/{function_name}")
async def preflight(function_name: str):
    """Every function answers CORS preflight without authentication"""
    return preflight_response()
