from __future__ import annotations

import json
import sys
from typing import Any, Dict, Optional
from .base import Reporter, TaskStatus, TaskRecord, get_verbosity

# "<prefix>: k=v k=v" status lines also produce a structured summary event
_SUMMARY_PREFIXES: Dict[str, str] = {
    "asset summary": "asset",
    "load summary": "load",
    "verify summary": "verify",
    "accessor summary": "accessor",
    "image summary": "image",
}


class JsonLinesReporter(Reporter):
    """Machine-readable JSON lines reporter."""

    def __init__(self, stream=None):
        super().__init__()
        self.stream = stream or sys.stderr

    def _emit(self, obj: dict):
        self.stream.write(json.dumps(obj, sort_keys=True) + "\n")

    def start_task(self, task_id: str, name: str, **meta: Any) -> None:
        super().start_task(task_id, name, **meta)
        self._emit({"event": "task_start", "id": task_id, "name": name, **meta})

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> Optional[TaskRecord]:
        rec = super().end_task(task_id, status, **final_meta)
        if rec is None:
            return None
        self._emit(
            {
                "event": "task_end",
                "id": task_id,
                "status": status.name.lower(),
                "duration_seconds": rec.duration,
                **rec.meta,
            }
        )
        return rec

    def _maybe_summary(self, message: str, **fields: Any) -> None:
        lower = message.lower()
        for prefix, stype in _SUMMARY_PREFIXES.items():
            if lower.startswith(prefix):
                kv_text = message.split(":", 1)[1] if ":" in message else ""
                kv_pairs = dict(
                    token.split("=", 1)
                    for token in kv_text.split()
                    if "=" in token
                )
                self._emit(
                    {
                        "event": "summary",
                        "summary_type": stype,
                        "raw": message,
                        **kv_pairs,
                        **fields,
                    }
                )
                break

    def status(self, message: str, **fields: Any) -> None:
        self._maybe_summary(message, **fields)
        self._emit(
            {"event": "status", "message": message, "level": "info", **fields}
        )

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() < level:
            return
        self._emit(
            {
                "event": "status",
                "message": message,
                "level": f"verbose{level}",
                **fields,
            }
        )

    def error(self, message: str, **fields: Any) -> None:
        self._emit(
            {"event": "status", "message": message, "level": "error", **fields}
        )

    def warning(self, message: str, **fields: Any) -> None:
        self._emit(
            {"event": "status", "message": message, "level": "warning", **fields}
        )

    def section(self, title: str) -> None:
        self._emit({"event": "section", "title": title})
