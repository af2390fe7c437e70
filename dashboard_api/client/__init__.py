"""Async client for the dashboard's n8n functions."""
from dashboard_api.client.config_controller import ConfigPhase, N8nConfig, N8nConfigController
from dashboard_api.client.connection import ConnectionMonitor, ConnectionResult, ConnectionStatus
from dashboard_api.client.functions_client import FunctionsClient
from dashboard_api.client.notifications import LoggingNotifier, Notifier, RecordingNotifier
from dashboard_api.client.workflow_client import Workflow, WorkflowClient
from dashboard_api.client.workflows_controller import WorkflowsController

__all__ = [
    "ConfigPhase",
    "ConnectionMonitor",
    "ConnectionResult",
    "ConnectionStatus",
    "FunctionsClient",
    "LoggingNotifier",
    "N8nConfig",
    "N8nConfigController",
    "Notifier",
    "RecordingNotifier",
    "Workflow",
    "WorkflowClient",
    "WorkflowsController",
]
