import logging
from typing import Any
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from dashboard_api.client.connection import ConnectionMonitor, ConnectionResult
from dashboard_api.client.functions_client import FunctionsClient
from dashboard_api.core.constants import (
    DEFAULT_N8N_BASE_URL,
    WORKFLOW_LIST_PATH,
    WORKFLOWS_PATH,
)
from dashboard_api.core.errors import ParseError

logger = logging.getLogger(__name__)

SAVE_CONFIG_FUNCTION = "save-n8n-config"


class Workflow(BaseModel):
    """n8n workflow as returned by the REST API; unknown fields are kept"""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str | None = None
    name: str = ""
    active: bool = False
    nodes: list[dict[str, Any]] = Field(default_factory=list)
    connections: dict[str, Any] = Field(default_factory=dict)
    tags: list[dict[str, Any]] = Field(default_factory=list)
    settings: dict[str, Any] | None = None
    created_at: str | None = Field(None, alias="createdAt")
    updated_at: str | None = Field(None, alias="updatedAt")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        # older n8n versions use integer ids
        if v is None or isinstance(v, str):
            return v
        return str(v)

    @field_validator("nodes", "tags", mode="before")
    @classmethod
    def null_list(cls, v):
        return [] if v is None else v

    @field_validator("connections", mode="before")
    @classmethod
    def null_dict(cls, v):
        return {} if v is None else v


def _to_workflow(payload: Any) -> Workflow:
    try:
        return Workflow.model_validate(payload)
    except ValidationError as e:
        raise ParseError("Unexpected workflow payload from n8n", details=str(e))


def _workflow_path(workflow_id: str, action: str = "") -> str:
    path = f"{WORKFLOWS_PATH}/{quote(str(workflow_id), safe='')}"
    return f"{path}/{action}" if action else path


class WorkflowClient:
    """
    Typed n8n workflow operations routed through the proxy function.

    Nothing is cached here: ``list`` always returns the full upstream
    collection and errors from the proxy propagate unchanged.
    """

    def __init__(
        self,
        functions: FunctionsClient,
        editor_base_url: str = DEFAULT_N8N_BASE_URL,
        monitor: ConnectionMonitor | None = None,
    ):
        self.functions = functions
        self.editor_base_url = editor_base_url
        self.monitor = monitor or ConnectionMonitor(functions)
        self.logger = logging.getLogger(__name__)

    async def list(self) -> list[Workflow]:
        self.logger.info("list: Entry")
        result = await self.functions.forward("GET", WORKFLOW_LIST_PATH)

        # n8n returns {data: [...], nextCursor} or a bare array on older versions
        if isinstance(result, list):
            items = result
        elif isinstance(result, dict) and isinstance(result.get("data"), list):
            items = result["data"]
        else:
            raise ParseError("Unexpected workflow list payload from n8n", details=result)

        workflows = [_to_workflow(item) for item in items]
        self.logger.info(f"list: Success - {len(workflows)} workflows")
        return workflows

    async def activate(self, workflow_id: str) -> Workflow | None:
        return await self._set_active(workflow_id, "activate")

    async def deactivate(self, workflow_id: str) -> Workflow | None:
        return await self._set_active(workflow_id, "deactivate")

    async def _set_active(self, workflow_id: str, action: str) -> Workflow | None:
        """n8n may answer with the updated workflow or an empty body"""
        self.logger.info(f"{action}: Entry - workflow: {workflow_id}")
        result = await self.functions.forward("POST", _workflow_path(workflow_id, action))
        self.logger.info(f"{action}: Success - workflow: {workflow_id}")
        return _to_workflow(result) if isinstance(result, dict) else None

    async def delete(self, workflow_id: str) -> None:
        """Irreversible; callers confirm with the user first"""
        self.logger.info(f"delete: Entry - workflow: {workflow_id}")
        await self.functions.forward("DELETE", _workflow_path(workflow_id))
        self.logger.info(f"delete: Success - workflow: {workflow_id}")

    def url_for(self, workflow_id: str) -> str:
        """Deep link to the workflow in the n8n editor"""
        base = self.editor_base_url.rstrip("/")
        if base.endswith("/api/v1"):
            base = base[: -len("/api/v1")]
        return f"{base}/workflow/{quote(str(workflow_id), safe='')}"

    async def check_connection(self) -> ConnectionResult:
        return await self.monitor.check()

    def connection_status(self) -> ConnectionResult:
        return self.monitor.current()

    async def save_config(self, api_key: str, base_url: str) -> dict:
        self.logger.info("save_config: Entry")
        result = await self.functions.invoke(
            SAVE_CONFIG_FUNCTION, {"apiKey": api_key, "baseUrl": base_url}
        )
        self.logger.info("save_config: Success")
        return result
