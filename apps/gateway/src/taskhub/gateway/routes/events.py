"""事件流路由

GET /api/v1/events: 按租户拉取 outbox 事件（最新在前），供外部消费者轮询。
"""

from fastapi import APIRouter, Depends, Query
from taskhub.core.services import TaskQueryService

from ..deps import RequestContext, get_request_context, get_store_group

router = APIRouter()


@router.get("/api/v1/events")
async def list_events(
    limit: int | None = Query(default=None, description="返回条数上限（缺省 50，最多 500）"),
    ctx: RequestContext = Depends(get_request_context),
    store_group=Depends(get_store_group),
):
    """查询当前租户的事件流"""
    service = TaskQueryService(store_group)
    result = await service.get_events(ctx.tenant_id, limit)
    return result.model_dump(mode="json")
