"""SyncRunner - Drives one reconciliation pass end to end."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING, TypeVar

from ticketsync.exceptions import RemoteError
from ticketsync.generator.exceptions import GeneratorError
from ticketsync.generator.models import GenerationOutcome, GenerationStatus
from ticketsync.reconcile.models import OutcomeStatus, TicketOutcome
from ticketsync.runner.models import RunReport

if TYPE_CHECKING:
    from ticketsync.generator import TicketGenerator
    from ticketsync.reconcile import ReconciliationEngine
    from ticketsync.snapshot import Snapshot, SnapshotLoader

logger = logging.getLogger("ticketsync.runner")

ItemT = TypeVar("ItemT")
ResultT = TypeVar("ResultT")


class SyncRunner:
    """Loads the snapshot, then fans out reconciliation and generation tasks.

    Snapshot errors abort the run before any task starts. Once tasks are
    running, a failure only affects the ticket or pull request it belongs to.
    """

    def __init__(
        self,
        loader: SnapshotLoader,
        engine: ReconciliationEngine,
        generator: TicketGenerator | None = None,
        max_workers: int = 8,
    ) -> None:
        """Initialize the runner.

        Args:
            loader: Fetches the snapshot at the start of the run.
            engine: Reconciles each ticket.
            generator: Files tickets for unlinked pull requests; None disables it.
            max_workers: Upper bound on concurrent remote tasks.
        """
        self.loader = loader
        self.engine = engine
        self.generator = generator
        self.max_workers = max_workers

    def _fan_out(
        self,
        items: Sequence[ItemT],
        task: Callable[[ItemT], ResultT],
        on_error: Callable[[ItemT, Exception], ResultT],
        describe: Callable[[ItemT], str],
    ) -> list[ResultT]:
        """Run ``task`` for every item on a bounded pool and wait for all of them."""
        if not items:
            return []

        results: list[ResultT] = []
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_item = {executor.submit(task, item): item for item in items}
            for future in as_completed(future_to_item):
                item = future_to_item[future]
                try:
                    results.append(future.result())
                except Exception as e:
                    logger.exception("Unexpected error processing %s: %s", describe(item), e)
                    results.append(on_error(item, e))
        return results

    def reconcile_all(self, snapshot: Snapshot) -> list[TicketOutcome]:
        """Reconcile every ticket of the snapshot concurrently."""
        logger.info("Reconciling %d ticket(s)", len(snapshot.tickets))
        return self._fan_out(
            snapshot.tickets,
            lambda ticket: self.engine.reconcile(ticket, snapshot),
            lambda ticket, e: TicketOutcome(
                ticket_key=ticket.key,
                status=OutcomeStatus.FAILED,
                link=ticket.link,
                error=str(e),
            ),
            lambda ticket: ticket.key,
        )

    def generate_all(self, snapshot: Snapshot, report: RunReport) -> None:
        """Create tickets for the unlinked pull requests of the snapshot."""
        if self.generator is None:
            return

        generator = self.generator
        eligible = generator.eligible(snapshot.pull_requests, report.linked_urls)
        logger.info("%d unlinked pull request(s) eligible for a new ticket", len(eligible))
        if not eligible:
            return

        try:
            sprint = generator.find_active_sprint()
        except (GeneratorError, RemoteError) as e:
            logger.error("Not generating tickets: %s", e)
            report.generation_error = str(e)
            return

        report.generated = self._fan_out(
            eligible,
            lambda pr: generator.create_for(pr, sprint),
            lambda pr, e: GenerationOutcome(
                pr_url=pr.url, status=GenerationStatus.FAILED, error=str(e)
            ),
            lambda pr: pr.url,
        )

    def run(self) -> RunReport:
        """Execute one pass.

        Raises:
            RemoteFetchError: If the snapshot can't be loaded.
        """
        snapshot = self.loader.load()
        report = RunReport()
        report.tickets = self.reconcile_all(snapshot)
        self.generate_all(snapshot, report)
        logger.info(report.summary())
        return report
