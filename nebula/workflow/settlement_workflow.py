"""Durable workflow for submitting one marketplace transition.

Steps: receive -> submit -> settled | rejected.

Determinism contract: this module contains NO I/O, NO randomness,
NO system clock access, NO mutable globals. Planning and submission
happen in the activity. The activity is attempted once: a rejected
or failed submission is terminal and surfaces to the caller, who
refreshes positions and starts a new request.
"""

from __future__ import annotations

from datetime import timedelta

from temporalio import workflow
from temporalio.common import RetryPolicy

with workflow.unsafe.imports_passed_through():
    from nebula.workflow.activities import SettlementActivities
    from nebula.workflow.types import SettlementOutcome, SettlementResult, TransitionRequest

SUBMISSION_RETRY = RetryPolicy(maximum_attempts=1)
SUBMISSION_TIMEOUT: timedelta = timedelta(seconds=60)


@workflow.defn(name="Settlement")
class SettlementWorkflow:
    """Invariants maintained:

    - Every request reaches exactly one terminal outcome
    - A transition is submitted at most once
    """

    def __init__(self) -> None:
        self._status: str = "RECEIVED"

    @workflow.query
    def get_status(self) -> str:
        """Current workflow phase."""
        return self._status

    @workflow.run
    async def run(self, request: TransitionRequest) -> SettlementResult:
        self._status = "SUBMITTING"
        result = await workflow.execute_activity_method(
            SettlementActivities.execute_transition,
            request,
            start_to_close_timeout=SUBMISSION_TIMEOUT,
            retry_policy=SUBMISSION_RETRY,
        )
        if result.outcome == SettlementOutcome.SUBMITTED:
            self._status = "SETTLED"
            workflow.logger.info("Request %s settled in %s", request.request_id, result.tx_hash)
        else:
            self._status = "REJECTED"
            workflow.logger.warning(
                "Request %s rejected: %s", request.request_id, result.error_code,
            )
        return result
