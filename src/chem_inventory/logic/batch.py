"""
Concurrent batch execution with per-item outcomes.

Auxiliary inserts and photo uploads are issued together and awaited as a
whole. A failing task never raises out of the batch: its exception is captured
in a BatchOutcome that the caller can inspect, log or retry.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from aws_lambda_powertools.metrics import MetricUnit

from chem_inventory.handlers.utils.observability import logger, metrics

DEFAULT_MAX_WORKERS = 4


@dataclass
class BatchOutcome:
    """Result of one task in a batch."""

    name: str
    succeeded: bool
    value: Any = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'succeeded': self.succeeded, 'error': self.error}


def run_batch(
    tasks: Dict[str, Callable[[], Any]],
    failure_metric: str,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> List[BatchOutcome]:
    """
    Run named tasks concurrently and wait for all of them.

    Args:
        tasks: Task name to zero-argument callable
        failure_metric: Metric incremented once per failed task
        max_workers: Upper bound on worker threads

    Returns:
        One outcome per task, in the order the tasks were given
    """
    if not tasks:
        return []

    outcomes: Dict[str, BatchOutcome] = {}
    with ThreadPoolExecutor(max_workers=min(max_workers, len(tasks))) as executor:
        future_to_name = {executor.submit(task): name for name, task in tasks.items()}

        for future in as_completed(future_to_name):
            name = future_to_name[future]
            try:
                outcomes[name] = BatchOutcome(name=name, succeeded=True, value=future.result())
            except Exception as e:
                logger.warning("Batch task failed", extra={"task": name, "error": str(e)})
                metrics.add_metric(name=failure_metric, unit=MetricUnit.Count, value=1)
                outcomes[name] = BatchOutcome(name=name, succeeded=False, error=str(e))

    return [outcomes[name] for name in tasks]
