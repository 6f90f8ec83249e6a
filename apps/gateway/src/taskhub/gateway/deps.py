"""依赖注入模块 -- 通过 FastAPI Depends 注入 Store 实例与请求上下文

Store 实例通过 app.state 管理，在 lifespan 中初始化/清理。
"""

from fastapi import Header, Request
from pydantic import BaseModel
from taskhub.core.models import Role, parse_role
from taskhub.core.store import StoreGroup

from .errors import HeaderError


class RequestContext(BaseModel):
    """请求级上下文 -- 租户 + 角色"""

    tenant_id: str
    role: Role


def get_store_group(request: Request) -> StoreGroup:
    """从 app.state 获取 StoreGroup 实例"""
    return request.app.state.store_group


def get_request_context(
    x_tenant_id: str | None = Header(default=None),
    x_role: str | None = Header(default=None),
) -> RequestContext:
    """校验 X-Tenant-Id / X-Role 请求头"""
    if not x_tenant_id or not x_tenant_id.strip():
        raise HeaderError("MISSING_TENANT", "Missing required header: X-Tenant-Id")

    role = parse_role(x_role)
    if role is None:
        raise HeaderError(
            "INVALID_ROLE",
            'Missing or invalid header: X-Role (must be "agent" or "manager", case-insensitive)',
        )

    return RequestContext(tenant_id=x_tenant_id.strip(), role=role)


def get_expected_version(
    if_match_version: str | None = Header(default=None),
) -> int:
    """解析 If-Match-Version 请求头（乐观锁期望版本）"""
    if if_match_version is None or not if_match_version.strip():
        raise HeaderError("MISSING_VERSION", "Missing required header: If-Match-Version")
    try:
        return int(if_match_version.strip())
    except ValueError:
        raise HeaderError(
            "MISSING_VERSION",
            "Header If-Match-Version must be an integer",
        ) from None
