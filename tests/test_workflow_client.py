"""
Tests for FunctionsClient and WorkflowClient
"""

import json

import httpx
import pytest

from dashboard_api.client.functions_client import FunctionsClient
from dashboard_api.client.workflow_client import WorkflowClient
from dashboard_api.core.errors import (
    ConfigurationMissing,
    ParseError,
    TransportError,
    Unauthorized,
    UpstreamError,
)

from conftest import UpstreamRecorder

FUNCTIONS_URL = "https://api.dashboard.test/functions/v1"


def make_client(*responses, editor_base_url="https://n8n.user.test/api/v1"):
    recorder = UpstreamRecorder(responses)
    functions = FunctionsClient(FUNCTIONS_URL, "user-token", client=recorder.client())
    return recorder, WorkflowClient(functions, editor_base_url=editor_base_url)


def envelope(status, code, error, details=None):
    body = {"error": error, "code": code}
    if details is not None:
        body["details"] = details
    return httpx.Response(status, json=body)


class TestFunctionsClient:

    @pytest.mark.asyncio
    async def test_forward_posts_to_proxy_function(self):
        recorder = UpstreamRecorder([httpx.Response(200, json={"ok": True})])
        functions = FunctionsClient(FUNCTIONS_URL + "/", lambda: "fresh-token", client=recorder.client())

        result = await functions.forward("post", "/workflows", body={"name": "New"})

        assert result == {"ok": True}
        request = recorder.requests[0]
        assert str(request.url) == f"{FUNCTIONS_URL}/n8n-proxy"
        assert request.method == "POST"
        assert request.headers["Authorization"] == "Bearer fresh-token"
        assert json.loads(request.content) == {
            "path": "/workflows",
            "method": "POST",
            "body": {"name": "New"},
        }

    @pytest.mark.asyncio
    async def test_text_payload_returned_as_text(self):
        recorder = UpstreamRecorder([
            httpx.Response(200, content=b"pong", headers={"content-type": "text/plain"}),
        ])
        functions = FunctionsClient(FUNCTIONS_URL, "t", client=recorder.client())

        assert await functions.invoke("ping") == "pong"

    @pytest.mark.asyncio
    async def test_unreachable_function(self):
        recorder = UpstreamRecorder([httpx.ConnectError("dns failure")])
        functions = FunctionsClient(FUNCTIONS_URL, "t", client=recorder.client())

        with pytest.raises(TransportError):
            await functions.invoke("n8n-proxy", {"path": "/workflows"})

    @pytest.mark.asyncio
    async def test_unauthorized_envelope(self):
        recorder = UpstreamRecorder([envelope(401, "unauthorized", "Authentication required")])
        functions = FunctionsClient(FUNCTIONS_URL, "t", client=recorder.client())

        with pytest.raises(Unauthorized):
            await functions.invoke("n8n-proxy", {"path": "/workflows"})


class TestWorkflowClientList:

    @pytest.mark.asyncio
    async def test_list_single_workflow(self):
        recorder, client = make_client(
            httpx.Response(200, json={"data": [{"id": "w1", "name": "Test", "active": False}]})
        )

        workflows = await client.list()

        assert len(workflows) == 1
        assert workflows[0].id == "w1"
        assert workflows[0].active is False
        assert json.loads(recorder.requests[0].content) == {
            "path": "/workflows?limit=100",
            "method": "GET",
        }

    @pytest.mark.asyncio
    async def test_list_accepts_bare_array(self):
        _, client = make_client(httpx.Response(200, json=[
            {"id": "w1", "name": "One", "active": True, "tags": [{"id": "t1", "name": "ads"}]},
            {"id": "w2", "name": "Two", "active": False},
        ]))

        workflows = await client.list()

        assert [w.id for w in workflows] == ["w1", "w2"]
        assert workflows[0].tags == [{"id": "t1", "name": "ads"}]

    @pytest.mark.asyncio
    async def test_list_rejects_unexpected_shape(self):
        _, client = make_client(httpx.Response(200, json={"message": "hello"}))

        with pytest.raises(ParseError):
            await client.list()

    @pytest.mark.asyncio
    async def test_list_malformed_json(self):
        _, client = make_client(
            httpx.Response(200, content=b"{not json", headers={"content-type": "application/json"})
        )

        with pytest.raises(ParseError):
            await client.list()

    @pytest.mark.asyncio
    async def test_upstream_error_propagates(self):
        _, client = make_client(envelope(
            500, "upstream_error", "n8n API error (500): boom", {"status": 500, "body": "boom"},
        ))

        with pytest.raises(UpstreamError) as exc_info:
            await client.list()

        assert exc_info.value.upstream_status == 500
        assert "boom" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_configuration_missing_propagates(self):
        _, client = make_client(envelope(400, "configuration_missing", "n8n configuration missing"))

        with pytest.raises(ConfigurationMissing):
            await client.list()

    @pytest.mark.asyncio
    async def test_list_accepts_integer_ids(self):
        _, client = make_client(httpx.Response(200, json=[
            {"id": 1, "name": "Legacy", "active": True},
        ]))

        workflows = await client.list()

        assert workflows[0].id == "1"
        assert workflows[0].active is True

    @pytest.mark.asyncio
    async def test_list_accepts_null_collections(self):
        _, client = make_client(httpx.Response(200, json={"data": [
            {"id": "w1", "name": "Test", "active": False, "tags": None, "nodes": None, "connections": None},
        ]}))

        workflows = await client.list()

        assert workflows[0].tags == []
        assert workflows[0].nodes == []
        assert workflows[0].connections == {}


class TestWorkflowClientMutations:

    @pytest.mark.asyncio
    async def test_activate(self):
        recorder, client = make_client(httpx.Response(200, json={"id": "w1", "name": "Test", "active": True}))

        workflow = await client.activate("w1")

        assert workflow.active is True
        assert json.loads(recorder.requests[0].content) == {
            "path": "/workflows/w1/activate",
            "method": "POST",
        }

    @pytest.mark.asyncio
    async def test_deactivate(self):
        recorder, client = make_client(httpx.Response(200, json={"id": "w1", "name": "Test", "active": False}))

        workflow = await client.deactivate("w1")

        assert workflow.active is False
        assert json.loads(recorder.requests[0].content)["path"] == "/workflows/w1/deactivate"

    @pytest.mark.asyncio
    async def test_delete(self):
        recorder, client = make_client(httpx.Response(200, json={"id": "w1"}))

        assert await client.delete("w1") is None
        assert json.loads(recorder.requests[0].content) == {
            "path": "/workflows/w1",
            "method": "DELETE",
        }

    @pytest.mark.asyncio
    async def test_save_config(self):
        recorder, client = make_client(httpx.Response(200, json={"success": True}))

        await client.save_config("key", "https://n8n.user.test")

        request = recorder.requests[0]
        assert str(request.url) == f"{FUNCTIONS_URL}/save-n8n-config"
        assert json.loads(request.content) == {"apiKey": "key", "baseUrl": "https://n8n.user.test"}

    def test_url_for(self):
        _, client = make_client()

        assert client.url_for("w1") == "https://n8n.user.test/workflow/w1"

    @pytest.mark.asyncio
    async def test_activate_with_empty_body(self):
        recorder, client = make_client(httpx.Response(204))

        assert await client.activate("w1") is None
        assert len(recorder.requests) == 1

    @pytest.mark.asyncio
    async def test_workflow_id_is_escaped(self):
        recorder, client = make_client(
            httpx.Response(200, json={"id": "w1"}),
            httpx.Response(200, json={"id": "w1"}),
        )

        await client.activate("../credentials?x=1")
        await client.delete("a/b")

        assert json.loads(recorder.requests[0].content)["path"] == (
            "/workflows/..%2Fcredentials%3Fx%3D1/activate"
        )
        assert json.loads(recorder.requests[1].content)["path"] == "/workflows/a%2Fb"
        assert client.url_for("a/b") == "https://n8n.user.test/workflow/a%2Fb"
