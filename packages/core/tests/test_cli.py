"""CLI 测试 -- python -m taskhub.core <command>

CLI 内部使用 asyncio.run，测试均为同步函数。
"""

import asyncio
from pathlib import Path

import pytest
from taskhub.core.__main__ import main
from taskhub.core.models import CreateTaskCommand
from taskhub.core.services import TaskCommandService
from taskhub.core.store import create_store_group


def _run_cli(monkeypatch: pytest.MonkeyPatch, *args: str) -> int:
    monkeypatch.setattr("sys.argv", ["taskhub.core", *args])
    with pytest.raises(SystemExit) as exc_info:
        main()
    return exc_info.value.code


async def _seed(db_path: str, *, break_audit: bool = False) -> None:
    group = await create_store_group(db_path)
    try:
        result, _ = await TaskCommandService(group).create_task(
            CreateTaskCommand(tenant_id="t1", workspace_id="w1", title="cli")
        )
        if break_audit:
            await group.conn.execute(
                "UPDATE tasks SET version = 5 WHERE task_id = ?",
                (result.task.task_id,),
            )
            await group.conn.commit()
    finally:
        await group.close()


@pytest.fixture
def cli_db(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    db_path = str(tmp_path / "cli" / "taskhub.db")
    monkeypatch.setenv("TASKHUB_DB_PATH", db_path)
    return db_path


class TestCli:
    def test_usage_without_command(self, monkeypatch, capsys):
        assert _run_cli(monkeypatch) == 1
        assert "用法" in capsys.readouterr().out

    def test_unknown_command(self, monkeypatch, capsys):
        assert _run_cli(monkeypatch, "explode") == 1
        assert "未知命令" in capsys.readouterr().out

    def test_init_db(self, monkeypatch, cli_db):
        assert _run_cli(monkeypatch, "init-db") == 0
        assert Path(cli_db).exists()

    def test_verify_audit_clean(self, monkeypatch, cli_db, capsys):
        asyncio.run(_seed(cli_db))
        assert _run_cli(monkeypatch, "verify-audit") == 0
        assert "审计链完整" in capsys.readouterr().out

    def test_verify_audit_drift(self, monkeypatch, cli_db, capsys):
        asyncio.run(_seed(cli_db, break_audit=True))
        assert _run_cli(monkeypatch, "verify-audit") == 2
        assert "row_event_mismatch" in capsys.readouterr().out

    def test_purge_idempotency(self, monkeypatch, cli_db, capsys):
        assert _run_cli(monkeypatch, "purge-idempotency") == 0
        assert "已清除 0 条" in capsys.readouterr().out
