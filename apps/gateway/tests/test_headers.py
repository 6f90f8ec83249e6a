"""请求头校验与错误映射测试

测试内容：
1. 缺少 X-Tenant-Id -> 400 MISSING_TENANT
2. 缺少或非法 X-Role -> 400 INVALID_ROLE，大小写不敏感
3. 缺少或非整数 If-Match-Version -> 400 MISSING_VERSION
4. 业务异常 -> HTTP 状态码映射表
"""

import pytest
from httpx import AsyncClient
from taskhub.core.errors import (
    AuthorizationError,
    InvalidTransitionError,
    TaskNotFoundError,
    TaskValidationError,
    VersionConflictError,
)
from taskhub.gateway.errors import status_for

BASE = "/api/v1/workspaces/w1/tasks"


class TestRequestHeaders:
    """请求头"""

    async def test_missing_tenant(self, client: AsyncClient):
        resp = await client.post(BASE, json={"title": "t"}, headers={"X-Role": "manager"})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "MISSING_TENANT"

    async def test_blank_tenant(self, client: AsyncClient):
        resp = await client.get(BASE, headers={"X-Tenant-Id": "  ", "X-Role": "agent"})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "MISSING_TENANT"

    @pytest.mark.parametrize("headers", [{"X-Tenant-Id": "t1"}, {"X-Tenant-Id": "t1", "X-Role": "admin"}])
    async def test_missing_or_invalid_role(self, client: AsyncClient, headers):
        resp = await client.get("/api/v1/events", headers=headers)
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "INVALID_ROLE"
        assert "case-insensitive" in resp.json()["error"]["message"]

    async def test_role_case_insensitive(self, client: AsyncClient):
        resp = await client.post(
            BASE, json={"title": "t"}, headers={"X-Tenant-Id": "t1", "X-Role": "MANAGER"}
        )
        assert resp.status_code == 201

    @pytest.mark.parametrize("version", [None, "", "two"])
    async def test_missing_or_invalid_version(self, client: AsyncClient, version):
        created = await client.post(
            BASE, json={"title": "t"}, headers={"X-Tenant-Id": "t1", "X-Role": "manager"}
        )
        task_id = created.json()["task"]["task_id"]

        headers = {"X-Tenant-Id": "t1", "X-Role": "manager"}
        if version is not None:
            headers["If-Match-Version"] = version
        resp = await client.post(
            f"{BASE}/{task_id}/assign", json={"assignee_id": "u1"}, headers=headers
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "MISSING_VERSION"

    async def test_health_needs_no_headers(self, client: AsyncClient):
        resp = await client.get("/health")
        assert resp.status_code == 200


class TestStatusMapping:
    """业务异常 -> HTTP 状态码"""

    @pytest.mark.parametrize(
        "error,status",
        [
            (TaskNotFoundError("x"), 404),
            (TaskValidationError("title is required"), 400),
            (AuthorizationError("only manager can assign tasks"), 403),
            (InvalidTransitionError(), 409),
            (VersionConflictError("x", 1), 409),
        ],
    )
    def test_status_for(self, error, status):
        assert status_for(error) == status
