"""Write the build heartbeat file (``_health/<name>.json``)."""

from __future__ import annotations

import datetime as _dt
import json
import pathlib
from typing import Iterable, Sequence

from .config import HEALTH_DIR
from .rewrite import RewriteStats

__all__ = ["BuildReport"]


def _utc_now_iso() -> str:
    """Return a second-precision UTC timestamp with a ``Z`` suffix."""

    now = _dt.datetime.now(_dt.timezone.utc).replace(microsecond=0, tzinfo=None)
    return now.isoformat() + "Z"


def _coerce_errors(messages: Sequence[str], *, limit: int = 20) -> list[str]:
    """Clean and deduplicate error strings while preserving order."""

    seen: set[str] = set()
    cleaned: list[str] = []
    for raw in messages:
        text = str(raw or "").strip()
        if not text or text in seen:
            continue
        seen.add(text)
        cleaned.append(text)
        if len(cleaned) >= limit:
            break
    return cleaned


class BuildReport:
    """Collect errors and counters for one build and persist them."""

    def __init__(self, name: str = "build", *, health_dir: pathlib.Path | None = None) -> None:
        self.name = name
        self.health_dir = health_dir or HEALTH_DIR
        self.errors: list[str] = []
        self.counts: dict[str, int] = {}

    def record_error(self, message: str) -> None:
        text = str(message or "").strip()
        if text:
            self.errors.append(text)

    def extend_errors(self, messages: Iterable[str]) -> None:
        for message in messages:
            self.record_error(str(message))

    def set_count(self, name: str, value: int) -> None:
        self.counts[name] = max(0, int(value))

    @property
    def has_errors(self) -> bool:
        return bool(_coerce_errors(self.errors))

    def write(self, stats: RewriteStats | None = None, *, finished_at: str | None = None) -> pathlib.Path:
        payload = {
            "finished_at": finished_at or _utc_now_iso(),
            "ok": not self.has_errors,
            "counts": dict(sorted(self.counts.items())),
            "rewrite": stats.as_dict() if stats is not None else {},
            "errors": _coerce_errors(self.errors),
        }
        self.health_dir.mkdir(parents=True, exist_ok=True)
        path = self.health_dir / f"{self.name}.json"
        path.write_text(json.dumps(payload, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
        return path
