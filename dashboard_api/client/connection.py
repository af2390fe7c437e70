import logging
from enum import Enum

from pydantic import BaseModel

from dashboard_api.client.functions_client import FunctionsClient
from dashboard_api.core.constants import HEALTH_PROBE_PATH

logger = logging.getLogger(__name__)


class ConnectionStatus(str, Enum):
    CHECKING = "checking"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    ERROR = "error"


class ConnectionResult(BaseModel):
    status: ConnectionStatus
    error: str | None = None


class ConnectionMonitor:
    """
    Tracks n8n reachability for one session.

    ``check`` is the only place the status moves to ``checking``; every call
    ends in ``connected`` or ``error`` and never raises.
    """

    def __init__(self, functions: FunctionsClient):
        self.functions = functions
        self.status = ConnectionStatus.DISCONNECTED
        self.last_error: str | None = None
        self.logger = logging.getLogger(__name__)

    async def check(self) -> ConnectionResult:
        self.status = ConnectionStatus.CHECKING
        self.logger.info("check: Entry")

        try:
            await self.functions.forward("GET", HEALTH_PROBE_PATH)
        except Exception as e:
            self.status = ConnectionStatus.ERROR
            self.last_error = str(e) or "Connection test failed"
            self.logger.error(f"check: Failure - {self.last_error}")
            return ConnectionResult(status=self.status, error=self.last_error)

        self.status = ConnectionStatus.CONNECTED
        self.last_error = None
        self.logger.info("check: Success - n8n connected")
        return ConnectionResult(status=self.status)

    def current(self) -> ConnectionResult:
        return ConnectionResult(status=self.status, error=self.last_error)
