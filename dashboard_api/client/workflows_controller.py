import inspect
import logging
from typing import Awaitable, Callable, Union

from dashboard_api.client.connection import ConnectionStatus
from dashboard_api.client.notifications import LoggingNotifier, Notifier
from dashboard_api.client.workflow_client import Workflow, WorkflowClient

logger = logging.getLogger(__name__)

Confirm = Callable[[Workflow], Union[bool, Awaitable[bool]]]


class WorkflowsController:
    """
    Session view of the user's n8n workflows.

    ``workflows`` is a transient copy of the last fetch. Mutations patch it
    only after n8n has confirmed them.
    """

    def __init__(self, client: WorkflowClient, notifier: Notifier | None = None):
        self.client = client
        self.notifier = notifier or LoggingNotifier()
        self.workflows: list[Workflow] = []
        self.loading = False
        self.connected = False
        self.connection_status = ConnectionStatus.DISCONNECTED
        self.logger = logging.getLogger(__name__)

    async def check_connection(self):
        self.loading = True
        try:
            result = await self.client.check_connection()
            self.connection_status = result.status
            self.connected = result.status == ConnectionStatus.CONNECTED

            if self.connected:
                self.notifier.notify("n8n connected", "Connection established")
                await self.load_workflows()
            else:
                self.notifier.notify(
                    "n8n connection error", result.error or "Unable to connect", "destructive"
                )
        finally:
            self.loading = False

    async def load_workflows(self):
        if not self.connected:
            return

        self.loading = True
        try:
            self.workflows = await self.client.list()
            self.logger.info(f"load_workflows: Success - {len(self.workflows)} workflows")
        except Exception as e:
            self.logger.error(f"load_workflows: Failure - {e}")
            self.notifier.notify("Error", "Unable to load workflows", "destructive")
        finally:
            self.loading = False

    async def toggle_workflow(self, workflow: Workflow) -> bool:
        if not workflow.id:
            return False

        target = not workflow.active
        try:
            if target:
                await self.client.activate(workflow.id)
            else:
                await self.client.deactivate(workflow.id)
        except Exception as e:
            self.logger.error(f"toggle_workflow: Failure - {e}")
            self.notifier.notify("Error", "Unable to update the workflow", "destructive")
            return False

        self.workflows = [
            w.model_copy(update={"active": target}) if w.id == workflow.id else w
            for w in self.workflows
        ]
        self.notifier.notify(
            "Workflow activated" if target else "Workflow deactivated",
            f'"{workflow.name}" {"activated" if target else "deactivated"}',
        )
        return True

    async def delete_workflow(self, workflow: Workflow, confirm: Confirm | None = None) -> bool:
        if not workflow.id:
            return False

        if confirm is not None:
            confirmed = confirm(workflow)
            if inspect.isawaitable(confirmed):
                confirmed = await confirmed
            if not confirmed:
                return False

        try:
            await self.client.delete(workflow.id)
        except Exception as e:
            self.logger.error(f"delete_workflow: Failure - {e}")
            self.notifier.notify("Error", "Unable to delete the workflow", "destructive")
            return False

        self.workflows = [w for w in self.workflows if w.id != workflow.id]
        self.notifier.notify("Workflow deleted", f'"{workflow.name}" was deleted')
        return True

    def workflow_url(self, workflow: Workflow) -> str | None:
        if not workflow.id:
            return None
        return self.client.url_for(workflow.id)
