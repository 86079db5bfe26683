"""
Commit coordination.

Sends a batch of statements to the backend in one round trip. The text
received is authoritative: it may be the synthesized output or the
operator's edited version, and is never re-derived from the changeset.

On success the changeset is cleared; on failure it is left exactly as it
was so the operator can correct the text and retry.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Sequence

from opentelemetry import trace
from prometheus_client import Counter, Histogram

from utils.metrics import get_or_create_metric
from utils.tracing import add_span_event, trace_operation

from tabledit.exceptions import CommitFailedError, CommitInProgressError
from tabledit.tracker import ChangesetStore

from .backend import MutationBackend

logger = logging.getLogger(__name__)

COMMITS_TOTAL = get_or_create_metric(
    lambda: Counter(
        "tabledit_commits_total",
        "Commit attempts by outcome",
        ["status"],
    ),
    "tabledit_commits_total",
)

COMMIT_DURATION = get_or_create_metric(
    lambda: Histogram(
        "tabledit_commit_duration_seconds",
        "Backend round trip time of a commit batch",
        buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
    ),
    "tabledit_commit_duration_seconds",
)


class CommitState(str, Enum):
    IDLE = "idle"
    COMMITTING = "committing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class CommitStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class CommitResult:
    """Outcome of one commit attempt."""

    status: CommitStatus
    statements: list[str]
    duration_ms: float = 0.0
    error: str | None = None
    changeset_cleared: bool = False
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def succeeded(self) -> bool:
        return self.status == CommitStatus.SUCCESS

    def raise_for_status(self) -> None:
        """Raise CommitFailedError if the attempt failed."""
        if self.status == CommitStatus.FAILED:
            raise CommitFailedError(self.error or "Commit failed", self.statements)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "statements": list(self.statements),
            "duration_ms": round(self.duration_ms, 3),
            "error": self.error,
            "changeset_cleared": self.changeset_cleared,
            "timestamp": self.timestamp.isoformat(),
        }


class CommitCoordinator:
    """
    Runs commit attempts for one table view session.

    State per attempt: IDLE -> COMMITTING -> SUCCEEDED | FAILED. A second
    attempt while one is COMMITTING is rejected without touching any state.
    """

    def __init__(self, backend: MutationBackend, changeset: ChangesetStore, connection_id: str):
        self.backend = backend
        self.changeset = changeset
        self.connection_id = connection_id
        self.state = CommitState.IDLE
        self.last_error: str | None = None
        self._lock = threading.Lock()

    @property
    def is_committing(self) -> bool:
        return self.state == CommitState.COMMITTING

    def commit(self, statements: Sequence[str]) -> CommitResult:
        """
        Submit a batch of statements as one backend call.

        Args:
            statements: Statement text to execute, in order

        Returns:
            CommitResult describing the outcome

        Raises:
            CommitInProgressError: If another commit is still running
        """
        batch = list(statements)
        if not batch:
            logger.debug("Nothing to commit")
            COMMITS_TOTAL.labels(status=CommitStatus.SKIPPED.value).inc()
            return CommitResult(status=CommitStatus.SKIPPED, statements=[])

        with self._lock:
            if self.state == CommitState.COMMITTING:
                raise CommitInProgressError("A commit is already in progress")
            self.state = CommitState.COMMITTING
            self.last_error = None
            epoch = self.changeset.epoch

        try:
            return self._run(batch, epoch)
        finally:
            with self._lock:
                if self.state == CommitState.COMMITTING:
                    # Interrupted before an outcome was recorded
                    logger.warning("Commit interrupted, marking it failed")
                    self.last_error = self.last_error or "Commit interrupted"
                    self.state = CommitState.FAILED

    def _run(self, batch: list[str], epoch: int) -> CommitResult:
        with trace_operation(
            "commit_batch",
            kind=trace.SpanKind.CLIENT,
            connection_id=self.connection_id,
            statement_count=len(batch),
        ):
            logger.info(f"Committing {len(batch)} statement(s)")
            start = time.monotonic()
            try:
                self.backend.execute_mutations(self.connection_id, batch)
            except Exception as e:
                duration = time.monotonic() - start
                message = str(e) or type(e).__name__
                logger.error(f"Commit failed after {duration:.3f}s: {message}")
                add_span_event("commit_failed", error=message)
                COMMIT_DURATION.observe(duration)
                COMMITS_TOTAL.labels(status=CommitStatus.FAILED.value).inc()
                with self._lock:
                    self.last_error = message
                    self.state = CommitState.FAILED
                return CommitResult(
                    status=CommitStatus.FAILED,
                    statements=batch,
                    duration_ms=duration * 1000,
                    error=message,
                )

            duration = time.monotonic() - start
            COMMIT_DURATION.observe(duration)
            COMMITS_TOTAL.labels(status=CommitStatus.SUCCESS.value).inc()

            with self._lock:
                cleared = self.changeset.epoch == epoch
                if cleared:
                    self.changeset.revert_all()
                else:
                    logger.info("Snapshot was replaced during commit, leaving the newer changeset alone")
                self.state = CommitState.SUCCEEDED

            add_span_event("commit_succeeded", changeset_cleared=cleared)
            logger.info(f"Committed {len(batch)} statement(s) in {duration * 1000:.1f}ms")
            return CommitResult(
                status=CommitStatus.SUCCESS,
                statements=batch,
                duration_ms=duration * 1000,
                changeset_cleared=cleared,
            )
