from __future__ import annotations

from typing import Any, Optional

from rich.console import Console
from rich.markup import escape

from .base import Reporter, TaskStatus, TaskRecord, get_verbosity

_STATUS_STYLE = {
    TaskStatus.SUCCESS: "[green]✔[/]",
    TaskStatus.FAILED: "[bold red]✖[/]",
}


class RichReporter(Reporter):
    """Colored console reporter backed by rich."""

    def __init__(self, console: Console | None = None):
        super().__init__()
        self.console = console or Console(
            stderr=True, highlight=False, soft_wrap=False
        )

    def start_task(self, task_id: str, name: str, **meta: Any) -> None:
        super().start_task(task_id, name, **meta)
        self.console.rule(escape(name))

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> Optional[TaskRecord]:
        rec = super().end_task(task_id, status, **final_meta)
        if rec is None:
            return None
        icon = _STATUS_STYLE.get(status, "")
        stats = " ".join(f"{k}={v}" for k, v in rec.meta.items())
        stats_part = f" [dim]\\[{escape(stats)}][/]" if stats else ""
        self.console.print(
            f"{icon} {escape(rec.name)} ({rec.duration:.2f}s){stats_part}"
        )
        return rec

    def status(self, message: str, **fields: Any) -> None:
        self.console.print(f"[green]INFO[/]: {escape(message)}")

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() < level:
            return
        self.console.print(f"[cyan]VERB{level}[/]: {escape(message)}")

    def error(self, message: str, **fields: Any) -> None:
        self.console.print(f"[bold red]ERROR[/]: {escape(message)}")

    def warning(self, message: str, **fields: Any) -> None:
        self.console.print(f"[yellow]WARN[/]: {escape(message)}")

    def section(self, title: str) -> None:
        self.console.rule(escape(title))
