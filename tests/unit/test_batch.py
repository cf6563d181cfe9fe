"""
Unit tests for the concurrent batch runner.
"""

import threading

from chem_inventory.logic.batch import BatchOutcome, run_batch


class TestRunBatch:
    """Test cases for run_batch."""

    def test_empty_batch(self):
        assert run_batch({}, failure_metric="TestFailure") == []

    def test_all_succeed_in_input_order(self):
        outcomes = run_batch(
            {"first": lambda: 1, "second": lambda: 2, "third": lambda: 3},
            failure_metric="TestFailure",
        )

        assert [o.name for o in outcomes] == ["first", "second", "third"]
        assert [o.value for o in outcomes] == [1, 2, 3]
        assert all(o.succeeded for o in outcomes)

    def test_failure_is_captured_not_raised(self):
        """Test that one failing task does not affect the others."""

        def fail():
            raise RuntimeError("disk full")

        outcomes = run_batch({"ok": lambda: "done", "bad": fail}, failure_metric="TestFailure")

        assert outcomes[0] == BatchOutcome(name="ok", succeeded=True, value="done")
        assert outcomes[1].succeeded is False
        assert outcomes[1].error == "disk full"
        assert outcomes[1].to_dict() == {"name": "bad", "succeeded": False, "error": "disk full"}

    def test_tasks_run_concurrently(self):
        """Test that tasks are in flight at the same time."""
        barrier = threading.Barrier(2, timeout=5)

        outcomes = run_batch({"a": barrier.wait, "b": barrier.wait}, failure_metric="TestFailure", max_workers=2)

        assert all(o.succeeded for o in outcomes)
