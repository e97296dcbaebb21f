from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .errors import CommandError, StepFailure
from .state_store import is_step_completed, mark_step_completed

logger = logging.getLogger(__name__)


class Step(Protocol):
    """A single provisioning step."""

    step_id: str

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    ran_steps: List[str]
    skipped_steps: List[str]


def _select(steps: Sequence[Step], start_at: Optional[str], stop_after: Optional[str]) -> List[Step]:
    ids = [s.step_id for s in steps]
    for name, value in (("start_at", start_at), ("stop_after", stop_after)):
        if value is not None and value not in ids:
            raise ValueError(f"Unknown step for {name}: {value} (known: {', '.join(ids)})")

    lo = ids.index(start_at) if start_at is not None else 0
    hi = ids.index(stop_after) + 1 if stop_after is not None else len(ids)
    if hi <= lo:
        raise ValueError(f"stop_after {stop_after} comes before start_at {start_at}")
    return list(steps[lo:hi])


def run_pipeline(
    *,
    state: Dict[str, Any],
    steps: Sequence[Step],
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    resume: bool = False,
) -> PipelineResult:
    """Run steps in order, stopping at the first failure.

    There are no retries and no rollback. A failing step raises StepFailure
    and the steps after it never run; discarding the half-built root is the
    caller's job.
    """

    ran: List[str] = []
    skipped: List[str] = []

    for step in _select(steps, start_at, stop_after):
        state.setdefault("execution", {})["current_step"] = step.step_id

        if resume and is_step_completed(state, step.step_id):
            logger.info("Skipping step %s (already completed)", step.step_id)
            skipped.append(step.step_id)
            continue

        logger.info("Running step %s", step.step_id)
        try:
            state = step.run(state)
        except StepFailure:
            raise
        except CommandError as e:
            logger.error("Step %s failed: %s", step.step_id, e)
            raise StepFailure(step.step_id, e.returncode, str(e)) from e
        except Exception as e:
            logger.error("Step %s failed: %s", step.step_id, e)
            raise StepFailure(step.step_id, 1, str(e)) from e

        mark_step_completed(state, step.step_id)
        ran.append(step.step_id)

    state.setdefault("execution", {})["current_step"] = None
    return PipelineResult(state=state, ran_steps=ran, skipped_steps=skipped)
