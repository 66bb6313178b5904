"""Worker configuration for the settlement workflow.

Starts a Temporal worker with the settlement workflow and the
activities of one Marketplace on the settlement task queue.

Usage::

    import asyncio
    from nebula.workflow.worker import run_worker

    asyncio.run(run_worker(marketplace))
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from temporalio.client import Client
from temporalio.worker import Worker

from nebula.trade.marketplace import Marketplace
from nebula.workflow.activities import SettlementActivities
from nebula.workflow.settlement_workflow import SettlementWorkflow

TASK_QUEUE = "nebula-settlement"


async def run_worker(
    marketplace: Marketplace,
    *,
    target_host: str = "localhost:7233",
    namespace: str = "default",
    task_queue: str = TASK_QUEUE,
    max_concurrent_submissions: int = 4,
) -> None:
    """Connect to Temporal and run the worker until interrupted."""
    client = await Client.connect(target_host, namespace=namespace)
    activities = SettlementActivities(marketplace)
    with ThreadPoolExecutor(max_workers=max_concurrent_submissions) as executor:
        worker = Worker(
            client,
            task_queue=task_queue,
            workflows=[SettlementWorkflow],
            activities=[activities.execute_transition],
            activity_executor=executor,
        )
        await worker.run()
