import logging
from enum import Enum

from pydantic import BaseModel

from dashboard_api.client.connection import ConnectionStatus
from dashboard_api.client.notifications import LoggingNotifier, Notifier
from dashboard_api.client.workflow_client import WorkflowClient
from dashboard_api.core.constants import DEFAULT_N8N_BASE_URL

logger = logging.getLogger(__name__)


class ConfigPhase(str, Enum):
    IDLE = "idle"
    TESTING = "testing"
    SAVING = "saving"


class N8nConfig(BaseModel):
    api_key: str = ""
    base_url: str = f"{DEFAULT_N8N_BASE_URL}/api/v1"


class N8nConfigController:
    """
    State behind the n8n settings form.

    Saving always ends with a health check, and a save only counts as
    successful when that check reports ``connected``.
    """

    def __init__(self, workflows: WorkflowClient, notifier: Notifier | None = None):
        self.workflows = workflows
        self.notifier = notifier or LoggingNotifier()
        self.config = N8nConfig()
        self.phase = ConfigPhase.IDLE
        self.connection_status = ConnectionStatus.DISCONNECTED
        self.logger = logging.getLogger(__name__)

    @property
    def testing(self) -> bool:
        return self.phase == ConfigPhase.TESTING

    @property
    def saving(self) -> bool:
        return self.phase == ConfigPhase.SAVING

    def set_config(self, api_key: str | None = None, base_url: str | None = None):
        if api_key is not None:
            self.config.api_key = api_key
        if base_url is not None:
            self.config.base_url = base_url

    async def test_connection(self) -> bool:
        """Persist the candidate settings, then probe n8n with them"""
        self.logger.info("test_connection: Entry")

        if not self.config.api_key.strip():
            self.notifier.notify("API key required", "Enter your n8n API key", "destructive")
            return False

        self.phase = ConfigPhase.TESTING
        try:
            await self._persist()
            return await self._verify()
        except Exception as e:
            self.logger.error(f"test_connection: Failure - {e}")
            self.notifier.notify("Test error", "Error while testing the connection", "destructive")
            return False
        finally:
            self.phase = ConfigPhase.IDLE

    async def save_config(self) -> bool:
        """Validate, persist, health check; success only when n8n is reachable"""
        self.logger.info("save_config: Entry")

        if not self.config.api_key.strip():
            self.notifier.notify("Incomplete configuration", "The API key is required", "destructive")
            return False

        self.phase = ConfigPhase.SAVING
        try:
            await self._persist()
        except Exception as e:
            self.logger.error(f"save_config: Failure - {e}")
            self.notifier.notify("Save error", "Unable to save the configuration", "destructive")
            self.phase = ConfigPhase.IDLE
            return False

        try:
            success = await self._verify()
            if success:
                self.notifier.notify("Configuration saved", "n8n settings stored")
                self.logger.info("save_config: Success")
            else:
                self.logger.error("save_config: Failure - saved settings did not pass the health check")
            return success
        finally:
            self.phase = ConfigPhase.IDLE

    async def _persist(self):
        await self.workflows.save_config(self.config.api_key, self.config.base_url)

    async def _verify(self) -> bool:
        result = await self.workflows.check_connection()
        self.connection_status = result.status

        if result.status == ConnectionStatus.CONNECTED:
            self.notifier.notify("Connection successful", "n8n is reachable")
            return True

        self.notifier.notify("Connection failed", result.error or "Test failed", "destructive")
        return False
