"""One end-to-end digest pass: watermark, cut, diff, persist, format."""

from datetime import datetime
from typing import Callable, List, Optional

from .diff import diff_snapshots
from .digest import format_digest
from .errors import DigestError
from .logging import get_logger
from .metrics import RunMetrics
from .models import DigestItem, RecordSummary, RunResult
from .watermark import DEFAULT_TIMEZONE, cut, format_timestamp, load_timezone

logger = get_logger(__name__)


class RunCoordinator:
    """Orchestrates a single digest run against a source and a store.

    A run is all-or-nothing with respect to the watermark: any error while
    listing, fetching or caching aborts the run before the watermark is
    advanced, so every unseen record is retried on the next run. Snapshots
    cached for earlier records of a failed run are kept.

    Only one run may be in flight per store; callers enforce this.
    """

    def __init__(self, source, store, timezone: str = DEFAULT_TIMEZONE,
                 clock: Optional[Callable[[], datetime]] = None, sink=None):
        """Initialize the coordinator.

        Args:
            source: RecordSource to read summaries and details from
            store: SnapshotStore holding cached snapshots and the watermark
            timezone: Named timezone the source timestamps are expressed in
            clock: Returns the current aware datetime; defaults to now in ``timezone``
            sink: Optional DeliverySink the digest of a successful run is handed to
        """
        self.source = source
        self.store = store
        self.timezone = load_timezone(timezone)
        self.clock = clock or (lambda: datetime.now(self.timezone))
        self.sink = sink
        self.metrics = RunMetrics()

    def run(self) -> RunResult:
        """Run one pass and return its result.

        Errors from the taxonomy are logged and returned as a failed result;
        anything else propagates.

        When a sink was supplied, a successful run is delivered through it and
        the outcome is attached as ``RunResult.delivery``. Delivery happens after
        the watermark is advanced and never rolls it back.
        """
        self.metrics = RunMetrics()
        logger.info(f"Starting digest run {self.metrics.run_id}")

        try:
            with self.store:
                items = self._process()
        except DigestError as e:
            logger.error(f"Digest run aborted, watermark not advanced: {e}")
            self.metrics.finalize(success=False, error_message=str(e))
            logger.info(self.metrics.get_summary())
            return RunResult(success=False, error=e)

        digest = format_digest(items)
        self.metrics.records_reported = len(items)
        self.metrics.finalize(success=True)
        logger.info(self.metrics.get_summary())
        if digest:
            logger.info(f"Digest:\n{digest}")
        result = RunResult(success=True, digest=digest, items=items)
        if self.sink is not None:
            result.delivery = self.sink.deliver(result)
        return result

    def _process(self) -> List[DigestItem]:
        watermark = self._acquire_watermark()

        summaries = self.source.list_summaries()
        self.metrics.summaries_listed = len(summaries)

        new_summaries = cut(summaries, watermark, self.timezone)
        self.metrics.records_new = len(new_summaries)
        logger.info(f"{len(new_summaries)} of {len(summaries)} records played since {format_timestamp(watermark, self.timezone)}")

        # Fully evaluated before the watermark moves; the first error escapes here
        items = [item for item in map(self._process_record, new_summaries) if not item.is_empty]

        now = self.clock()
        self.store.set_watermark(now)
        self.metrics.watermark_after = format_timestamp(now, self.timezone)
        return items

    def _acquire_watermark(self) -> datetime:
        """Read the watermark, initializing it to now on the very first run."""
        watermark = self.store.get_watermark()
        if watermark is None:
            watermark = self.clock()
            logger.info("No watermark found - initializing to now, nothing will be reported this run")
            self.store.set_watermark(watermark)
            self.metrics.first_run = True
        self.metrics.watermark_before = format_timestamp(watermark, self.timezone)
        logger.info(f"Last processed: {self.metrics.watermark_before}")
        return watermark

    def _process_record(self, summary: RecordSummary) -> DigestItem:
        old = self.store.get(summary.id)
        new = self.source.fetch_detail(summary.id)

        if old is None:
            logger.debug(f"No cached snapshot for {summary.title!r}, using it as its own baseline")
            old = new
            self.metrics.baselines_created += 1

        changes = diff_snapshots(old, new)

        self.store.set(summary.id, new)
        self.metrics.snapshots_written += 1
        logger.info(f"Updated snapshot cache: {summary.title}")

        return DigestItem(title=summary.title, changes=changes)
