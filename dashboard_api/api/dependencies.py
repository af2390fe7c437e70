"""Shared service dependencies; tests override these on the app."""
from fastapi import Depends

from dashboard_api.core.middleware import get_current_user
from dashboard_api.services.diagnostics_service import DiagnosticsService
from dashboard_api.services.proxy_service import N8nProxyService
from dashboard_api.services.secret_store import SecretStore


def get_secret_store() -> SecretStore:
    return SecretStore()


def get_proxy_service() -> N8nProxyService:
    return N8nProxyService()


def get_diagnostics_service(
    proxy: N8nProxyService = Depends(get_proxy_service),
) -> DiagnosticsService:
    return DiagnosticsService(proxy)


__all__ = [
    "get_current_user",
    "get_secret_store",
    "get_proxy_service",
    "get_diagnostics_service",
]
