"""
Tests for Supabase token verification
"""

import httpx
import pytest

from dashboard_api.core.errors import Unauthorized
from dashboard_api.core.supabase_auth import verify_supabase_token

from conftest import UpstreamRecorder


class TestVerifySupabaseToken:

    @pytest.mark.asyncio
    async def test_valid_token(self):
        auth = UpstreamRecorder([httpx.Response(200, json={"id": "user_123", "email": "a@b.test"})])

        user = await verify_supabase_token("token-abc", client=auth.client())

        assert user["id"] == "user_123"
        request = auth.requests[0]
        assert str(request.url) == "https://test-project.supabase.co/auth/v1/user"
        assert request.headers["apikey"] == "test-anon-key"
        assert request.headers["Authorization"] == "Bearer token-abc"

    @pytest.mark.asyncio
    async def test_rejected_token(self):
        auth = UpstreamRecorder([httpx.Response(401, json={"msg": "invalid JWT"})])

        with pytest.raises(Unauthorized) as exc_info:
            await verify_supabase_token("expired", client=auth.client())

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_response_without_user(self):
        auth = UpstreamRecorder([httpx.Response(200, json={})])

        with pytest.raises(Unauthorized):
            await verify_supabase_token("token", client=auth.client())

    @pytest.mark.asyncio
    async def test_auth_service_unreachable(self):
        auth = UpstreamRecorder([httpx.ConnectError("refused")])

        with pytest.raises(Unauthorized):
            await verify_supabase_token("token", client=auth.client())
