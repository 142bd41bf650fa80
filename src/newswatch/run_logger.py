"""Per-run JSON logs of crawl stages."""

import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from newswatch.data import CrawlResult, Usage


class StageRecord(BaseModel):
    """Counts, usage and timing of one crawl stage."""

    stage: str
    component: str
    input_count: int
    output_count: int
    usage: dict[str, int] | None = None
    duration_seconds: float = 0.0
    finished_at: str = ""


class CrawlRunRecord(BaseModel):
    """Everything recorded about one crawl run."""

    run_id: str
    trigger: str
    started_at: str
    completed_at: str | None = None
    stages: list[StageRecord] = Field(default_factory=list)
    result: dict[str, Any] | None = None


def log_filename(started_at: str) -> str:
    """``crawl_2026-10-18T06-00-00.json`` for a run started at that time."""
    stamp = started_at.split(".")[0].split("+")[0].replace(":", "-")
    return f"crawl_{stamp}.json"


class RunLogger:
    """Collects stage records for the current crawl and writes them as JSON.

    A disabled logger accepts every call and writes nothing.

    Args:
        log_dir: Directory for the JSON files; created on first write.
        enabled: If False, all methods become no-ops.
    """

    def __init__(self, log_dir: Path, *, enabled: bool = True) -> None:
        self._log_dir = log_dir
        self._enabled = enabled
        self._record: CrawlRunRecord | None = None
        self._last_log_path: Path | None = None

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def last_log_path(self) -> Path | None:
        """Path to the last written log file, or None."""
        return self._last_log_path

    def start_run(self, trigger: str) -> None:
        """Begin a record; *trigger* is "scheduled" or "manual"."""
        if not self._enabled:
            return
        self._record = CrawlRunRecord(
            run_id=uuid.uuid4().hex,
            trigger=trigger,
            started_at=datetime.now(tz=UTC).isoformat(),
        )

    def log_stage(
        self,
        stage: str,
        component: str,
        *,
        input_count: int,
        output_count: int,
        usage: Usage | None = None,
        duration_seconds: float = 0.0,
    ) -> None:
        if not self._enabled or self._record is None:
            return
        self._record.stages.append(
            StageRecord(
                stage=stage,
                component=component,
                input_count=input_count,
                output_count=output_count,
                usage=usage.summary() if usage is not None else None,
                duration_seconds=round(duration_seconds, 4),
                finished_at=datetime.now(tz=UTC).isoformat(),
            )
        )

    def finish_run(self, result: CrawlResult) -> Path | None:
        """Attach *result* and write the record.

        Returns:
            Path of the written file, or None when disabled or not started.
        """
        if not self._enabled or self._record is None:
            return None

        record, self._record = self._record, None
        record.completed_at = datetime.now(tz=UTC).isoformat()
        record.result = result.to_dict()

        self._log_dir.mkdir(parents=True, exist_ok=True)
        path = self._log_dir / log_filename(record.started_at)
        path.write_text(record.model_dump_json(indent=2), encoding="utf-8")
        self._last_log_path = path
        return path
