"""任务路由

POST /api/v1/workspaces/{workspace_id}/tasks: 创建任务（Idempotency-Key 可选）
POST /api/v1/workspaces/{workspace_id}/tasks/{task_id}/assign: 分配任务
POST /api/v1/workspaces/{workspace_id}/tasks/{task_id}/transition: 状态流转
GET  /api/v1/workspaces/{workspace_id}/tasks/{task_id}: 任务详情 + 时间线
GET  /api/v1/workspaces/{workspace_id}/tasks: 任务列表（筛选 + 游标分页）
"""

from fastapi import APIRouter, Depends, Header, Query
from pydantic import BaseModel, Field
from starlette.responses import JSONResponse
from taskhub.core.models import (
    AssignTaskCommand,
    CreateTaskCommand,
    TaskPriority,
    TaskState,
    TransitionTaskCommand,
)
from taskhub.core.services import TaskCommandService, TaskQueryService

from ..deps import (
    RequestContext,
    get_expected_version,
    get_request_context,
    get_store_group,
)

router = APIRouter(prefix="/api/v1/workspaces/{workspace_id}/tasks")


class CreateTaskRequest(BaseModel):
    """创建任务请求体（标题规则由 core 校验）"""

    title: str = Field(description="任务标题")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="优先级")


class AssignTaskRequest(BaseModel):
    """分配任务请求体"""

    assignee_id: str = Field(description="负责人 ID")


class TransitionTaskRequest(BaseModel):
    """状态流转请求体"""

    to_state: TaskState = Field(description="目标状态")


@router.post("")
async def create_task(
    workspace_id: str,
    body: CreateTaskRequest,
    idempotency_key: str | None = Header(default=None),
    ctx: RequestContext = Depends(get_request_context),
    store_group=Depends(get_store_group),
):
    """创建任务

    - 新任务返回 201 Created
    - Idempotency-Key 命中返回 200 OK，响应体与首次一致
    """
    service = TaskCommandService(store_group)
    result, created = await service.create_task(
        CreateTaskCommand(
            tenant_id=ctx.tenant_id,
            workspace_id=workspace_id,
            title=body.title,
            priority=body.priority,
            idempotency_key=idempotency_key,
        )
    )
    return JSONResponse(
        status_code=201 if created else 200,
        content=result.model_dump(mode="json"),
    )


@router.post("/{task_id}/assign")
async def assign_task(
    workspace_id: str,
    task_id: str,
    body: AssignTaskRequest,
    expected_version: int = Depends(get_expected_version),
    ctx: RequestContext = Depends(get_request_context),
    store_group=Depends(get_store_group),
):
    """分配任务（仅 manager）"""
    service = TaskCommandService(store_group)
    result = await service.assign_task(
        AssignTaskCommand(
            workspace_id=workspace_id,
            task_id=task_id,
            assignee_id=body.assignee_id,
            role=ctx.role,
            expected_version=expected_version,
        )
    )
    return result.model_dump(mode="json")


@router.post("/{task_id}/transition")
async def transition_task(
    workspace_id: str,
    task_id: str,
    body: TransitionTaskRequest,
    expected_version: int = Depends(get_expected_version),
    ctx: RequestContext = Depends(get_request_context),
    store_group=Depends(get_store_group),
):
    """任务状态流转"""
    service = TaskCommandService(store_group)
    result = await service.transition_task_state(
        TransitionTaskCommand(
            workspace_id=workspace_id,
            task_id=task_id,
            to_state=body.to_state,
            role=ctx.role,
            expected_version=expected_version,
        )
    )
    return result.model_dump(mode="json")


@router.get("/{task_id}")
async def get_task_detail(
    workspace_id: str,
    task_id: str,
    ctx: RequestContext = Depends(get_request_context),
    store_group=Depends(get_store_group),
):
    """查询任务详情，包含最新在前的事件时间线"""
    service = TaskQueryService(store_group)
    detail = await service.get_task(workspace_id, task_id)
    return detail.model_dump(mode="json")


@router.get("")
async def list_tasks(
    workspace_id: str,
    state: TaskState | None = Query(default=None, description="按状态筛选"),
    assignee_id: str | None = Query(default=None, description="按负责人筛选"),
    limit: int | None = Query(default=None, description="每页条数（缺省 20，上限 100）"),
    cursor: str | None = Query(default=None, description="上一页返回的 next_cursor"),
    ctx: RequestContext = Depends(get_request_context),
    store_group=Depends(get_store_group),
):
    """查询任务列表，created_at 倒序，游标分页"""
    service = TaskQueryService(store_group)
    page = await service.list_tasks(
        workspace_id,
        state=state,
        assignee_id=assignee_id,
        limit=limit,
        cursor=cursor,
    )
    return page.model_dump(mode="json")
