"""
Unit tests for commit coordination and the DB-API backend.

Tests commit state transitions, changeset clearing on success, preservation
on failure, rejection of concurrent commits and transaction handling.
"""

import threading
from unittest.mock import MagicMock, Mock, call

import pytest

from tabledit.commit import CommitCoordinator, CommitState, CommitStatus, DBAPIBackend
from tabledit.exceptions import CommitFailedError, CommitInProgressError
from tabledit.tracker import ChangesetStore

STATEMENTS = ['UPDATE "users" SET "age"=31 WHERE "id" = 7;']


def _tracked_store() -> ChangesetStore:
    store = ChangesetStore()
    store.update_cell(2, "age", 2, 30, 31.0)
    store.delete_row(0)
    return store


class TestCommitCoordinator:
    """Test CommitCoordinator"""

    def setup_method(self):
        """Set up test fixtures."""
        self.backend = Mock()
        self.store = _tracked_store()
        self.coordinator = CommitCoordinator(self.backend, self.store, "local")

    def test_success_clears_changeset(self):
        result = self.coordinator.commit(STATEMENTS)

        assert result.status == CommitStatus.SUCCESS
        assert result.succeeded
        assert result.changeset_cleared
        assert not self.store.has_changes()
        assert self.coordinator.state == CommitState.SUCCEEDED
        self.backend.execute_mutations.assert_called_once_with("local", STATEMENTS)

    def test_text_is_sent_verbatim(self):
        edited = ["update users set age = 99 where id = 7"]

        self.coordinator.commit(edited)

        self.backend.execute_mutations.assert_called_once_with("local", edited)

    def test_failure_preserves_changeset(self):
        before = self.store.entries()
        self.backend.execute_mutations.side_effect = RuntimeError('relation "users" does not exist')

        result = self.coordinator.commit(STATEMENTS)

        assert result.status == CommitStatus.FAILED
        assert result.error == 'relation "users" does not exist'
        assert self.store.entries() == before
        assert self.coordinator.state == CommitState.FAILED
        assert self.coordinator.last_error == 'relation "users" does not exist'

    def test_failure_can_be_retried(self):
        self.backend.execute_mutations.side_effect = [RuntimeError("deadlock detected"), None]

        first = self.coordinator.commit(STATEMENTS)
        second = self.coordinator.commit(STATEMENTS)

        assert first.status == CommitStatus.FAILED
        assert second.status == CommitStatus.SUCCESS
        assert self.coordinator.last_error is None
        assert not self.store.has_changes()

    def test_interrupted_commit_can_be_retried(self):
        before = self.store.entries()
        self.backend.execute_mutations.side_effect = [KeyboardInterrupt(), None]

        with pytest.raises(KeyboardInterrupt):
            self.coordinator.commit(STATEMENTS)

        assert self.coordinator.state == CommitState.FAILED
        assert not self.coordinator.is_committing
        assert self.store.entries() == before

        result = self.coordinator.commit(STATEMENTS)

        assert result.status == CommitStatus.SUCCESS
        assert not self.store.has_changes()

    def test_empty_batch_skipped(self):
        result = self.coordinator.commit([])

        assert result.status == CommitStatus.SKIPPED
        self.backend.execute_mutations.assert_not_called()
        assert self.store.has_changes()
        assert self.coordinator.state == CommitState.IDLE

    def test_raise_for_status(self):
        self.backend.execute_mutations.side_effect = RuntimeError("syntax error at or near \"SET\"")

        result = self.coordinator.commit(STATEMENTS)

        with pytest.raises(CommitFailedError) as exc_info:
            result.raise_for_status()
        assert exc_info.value.message == 'syntax error at or near "SET"'
        assert exc_info.value.statements == STATEMENTS

    def test_exception_without_message_uses_type_name(self):
        self.backend.execute_mutations.side_effect = TimeoutError()

        result = self.coordinator.commit(STATEMENTS)

        assert result.error == "TimeoutError"

    def test_result_to_dict(self):
        result = self.coordinator.commit(STATEMENTS)
        data = result.to_dict()

        assert data["status"] == "success"
        assert data["statements"] == STATEMENTS
        assert data["error"] is None
        assert data["changeset_cleared"] is True
        assert "timestamp" in data

    def test_concurrent_commit_rejected(self):
        started = threading.Event()
        release = threading.Event()

        def slow_execute(connection_id, statements):
            started.set()
            release.wait(timeout=5)

        self.backend.execute_mutations.side_effect = slow_execute
        results = []
        worker = threading.Thread(target=lambda: results.append(self.coordinator.commit(STATEMENTS)))
        worker.start()
        try:
            assert started.wait(timeout=5)
            assert self.coordinator.is_committing

            with pytest.raises(CommitInProgressError):
                self.coordinator.commit(STATEMENTS)
        finally:
            release.set()
            worker.join(timeout=5)

        assert results[0].status == CommitStatus.SUCCESS
        assert self.backend.execute_mutations.call_count == 1

    def test_reload_during_commit_keeps_newer_changeset(self):
        def reload_mid_commit(connection_id, statements):
            self.store.revert_all()
            self.store.update_cell(1, "name", 1, "Carol", "Caz")

        self.backend.execute_mutations.side_effect = reload_mid_commit

        result = self.coordinator.commit(STATEMENTS)

        assert result.status == CommitStatus.SUCCESS
        assert not result.changeset_cleared
        assert self.store.cell_changed(1, 1)


class TestDBAPIBackend:
    """Test DBAPIBackend transaction handling"""

    def setup_method(self):
        """Set up test fixtures."""
        self.connection = MagicMock()
        self.cursor = self.connection.cursor.return_value
        self.connect = Mock(return_value=self.connection)

    def test_batch_committed_once(self):
        backend = DBAPIBackend(self.connect)

        backend.execute_mutations("db", ["A;", "B;"])

        self.connect.assert_called_once_with("db")
        assert self.cursor.execute.call_args_list == [call("A;"), call("B;")]
        self.connection.commit.assert_called_once()
        self.connection.rollback.assert_not_called()
        self.connection.close.assert_called_once()

    def test_error_rolls_back_and_reraises(self):
        self.cursor.execute.side_effect = [None, RuntimeError("duplicate key value")]
        backend = DBAPIBackend(self.connect)

        with pytest.raises(RuntimeError, match="duplicate key value"):
            backend.execute_mutations("db", ["A;", "B;", "C;"])

        assert self.cursor.execute.call_count == 2
        self.connection.commit.assert_not_called()
        self.connection.rollback.assert_called_once()
        self.connection.close.assert_called_once()
        self.cursor.close.assert_called_once()

    def test_failed_rollback_keeps_batch_error(self):
        self.cursor.execute.side_effect = RuntimeError("server closed the connection unexpectedly")
        self.connection.rollback.side_effect = RuntimeError("connection already closed")
        backend = DBAPIBackend(self.connect)

        with pytest.raises(RuntimeError, match="server closed the connection unexpectedly"):
            backend.execute_mutations("db", ["A;"])

        self.connection.rollback.assert_called_once()
        self.connection.close.assert_called_once()

    def test_failed_rollback_surfaces_batch_error_through_coordinator(self):
        self.cursor.execute.side_effect = RuntimeError("server closed the connection unexpectedly")
        self.connection.rollback.side_effect = RuntimeError("connection already closed")
        coordinator = CommitCoordinator(DBAPIBackend(self.connect), _tracked_store(), "db")

        result = coordinator.commit(STATEMENTS)

        assert result.status == CommitStatus.FAILED
        assert result.error == "server closed the connection unexpectedly"

    def test_transient_connect_error_retried(self, monkeypatch):
        monkeypatch.setattr("utils.retry.time.sleep", lambda seconds: None)
        self.connect.side_effect = [ConnectionError("connection refused"), self.connection]
        backend = DBAPIBackend(self.connect, connect_retries=2)

        backend.execute_mutations("db", ["A;"])

        assert self.connect.call_count == 2
        self.connection.commit.assert_called_once()
