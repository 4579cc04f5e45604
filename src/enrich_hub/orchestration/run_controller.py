"""
Enrichment run controller.

Owns the lifecycle of one enrichment run:

    pending --(checks pass)--> running --> completed
       |                          |
       +--(check fails)--> rejected +--(error / cancel)--> failed

Pending checks run before any row is touched; a run that fails them is
rejected and never processes a row. While running, rows are enriched in
batches of ``batch_size``, sequentially or on a thread pool. Each batch
writes into its own slots of a pre-sized buffer and returns its own
statistics, which are reduced with ``EnrichmentStats.merge``; output order
therefore never depends on scheduling.

The controller is the recovery point for every run error: callers always get
an EnrichmentOutcome back, never an exception.
"""

import threading
import uuid
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional, Sequence, Tuple

from enrich_hub.config.settings import Settings, get_settings
from enrich_hub.domain.company_enrichment.exceptions import (
    EmptyReferenceCollection,
    EnrichmentError,
    InternalFailure,
    NoSourceColumnSelected,
    RowCeilingExceeded,
    RunCancelled,
)
from enrich_hub.domain.company_enrichment.models import (
    CompanyRecord,
    EnrichedRow,
    EnrichmentOutcome,
    EnrichmentRun,
    RunStatus,
    SourceRow,
    coerce_rows,
)
from enrich_hub.domain.company_enrichment.observability import EnrichmentStats
from enrich_hub.domain.company_enrichment.schema import synthesize_headers
from enrich_hub.domain.company_enrichment.service import (
    DomainIndex,
    build_domain_index,
    enrich_batch,
)
from enrich_hub.infrastructure.enrichment.progress import (
    ProgressCallback,
    ProgressReporter,
)
from enrich_hub.io.readers.csv_table import decode_csv, encode_csv
from enrich_hub.utils.logging import bind_context

# (start index, enriched rows, batch stats)
BatchResult = Tuple[int, List[EnrichedRow], EnrichmentStats]


class EnrichmentRunController:
    """
    Submission surface for enrichment runs.

    One controller may serve many runs. It holds configuration only and every
    run gets fresh state.

    Example:
        >>> controller = EnrichmentRunController(max_workers=4)
        >>> outcome = controller.submit(csv_text, "Email", companies)
        >>> outcome.status
        <RunStatus.COMPLETED: 'completed'>
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        row_ceiling: Optional[int] = None,
        max_workers: Optional[int] = None,
        batch_size: Optional[int] = None,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
        verbose: bool = False,
    ):
        """
        Initialize the controller.

        Args:
            settings: Application settings (default: ``get_settings()``)
            row_ceiling: Override of ``settings.row_ceiling``
            max_workers: Override of ``settings.max_workers``; 1 runs batches inline
            batch_size: Override of ``settings.progress_interval``
            progress_callback: Receives ``(processed, total)`` after each batch
            cancel_event: Set by the caller to stop the run between batches
            verbose: Show a tqdm progress bar
        """
        settings = settings or get_settings()
        self.row_ceiling = row_ceiling if row_ceiling is not None else settings.row_ceiling
        self.max_workers = max(1, max_workers if max_workers is not None else settings.max_workers)
        self.batch_size = max(
            1, batch_size if batch_size is not None else settings.progress_interval
        )
        self.progress_callback = progress_callback
        self.cancel_event = cancel_event or threading.Event()
        self.verbose = verbose

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def submit(
        self,
        raw_text: str,
        source_column: Optional[str],
        companies: Sequence[CompanyRecord],
    ) -> EnrichmentOutcome:
        """
        Decode, validate and enrich an uploaded CSV table.

        Args:
            raw_text: Full CSV text of the upload
            source_column: Column holding the e-mail or URL to match on
            companies: Validated reference collection

        Returns:
            EnrichmentOutcome in status completed, rejected or failed
        """
        run = EnrichmentRun(source_column=source_column, row_ceiling=self.row_ceiling)
        log = self._run_logger(source_column)

        try:
            self._check_source_selected(source_column)
            headers, rows = decode_csv(raw_text)
        except EnrichmentError as e:
            return self._reject(run, e, log)

        return self._execute(run, headers, rows, companies, log)

    def run(
        self,
        headers: Sequence[str],
        rows: Sequence[SourceRow],
        source_column: Optional[str],
        companies: Sequence[CompanyRecord],
    ) -> EnrichmentOutcome:
        """
        Enrich an already decoded table.

        Args:
            headers: Column names in table order
            rows: Source rows (column -> text)
            source_column: Join column
            companies: Validated reference collection

        Returns:
            EnrichmentOutcome in status completed, rejected or failed
        """
        run = EnrichmentRun(source_column=source_column, row_ceiling=self.row_ceiling)
        log = self._run_logger(source_column)

        try:
            self._check_source_selected(source_column)
        except EnrichmentError as e:
            return self._reject(run, e, log)

        return self._execute(run, list(headers), coerce_rows(rows), companies, log)

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def _run_logger(self, source_column: Optional[str]):
        return bind_context(
            __name__,
            run_id=f"run_{uuid.uuid4().hex[:8]}",
            source_column=source_column,
            row_ceiling=self.row_ceiling,
        )

    @staticmethod
    def _check_source_selected(source_column: Optional[str]) -> None:
        if source_column is None or not str(source_column).strip():
            raise NoSourceColumnSelected("Please select a column containing emails or URLs")

    def _check_pending(
        self,
        headers: Sequence[str],
        rows: Sequence[SourceRow],
        source_column: str,
        companies: Sequence[CompanyRecord],
    ) -> DomainIndex:
        if source_column not in headers:
            raise NoSourceColumnSelected(
                f"Selected column '{source_column}' is not present in the table"
            )

        if len(rows) > self.row_ceiling:
            raise RowCeilingExceeded(limit=self.row_ceiling, row_count=len(rows))

        index = build_domain_index(companies)
        if len(index) == 0:
            raise EmptyReferenceCollection(
                "No companies with a domain are available for matching"
            )
        return index

    def _execute(
        self,
        run: EnrichmentRun,
        headers: List[str],
        rows: List[Dict[str, str]],
        companies: Sequence[CompanyRecord],
        log,
    ) -> EnrichmentOutcome:
        try:
            index = self._check_pending(headers, rows, run.source_column, companies)
        except EnrichmentError as e:
            return self._reject(run, e, log)
        except Exception as e:
            return self._reject(
                run,
                InternalFailure(f"Failed to prepare run: {type(e).__name__}: {e}"),
                log,
            )

        run.total_rows = len(rows)
        run.transition(RunStatus.RUNNING)
        log.info(
            "enrichment_run.started",
            total_rows=run.total_rows,
            reference_domains=len(index),
            skipped_records=index.skipped,
            overwritten_records=index.overwritten,
            max_workers=self.max_workers,
            batch_size=self.batch_size,
        )

        reporter = ProgressReporter(
            total_rows=run.total_rows,
            verbose=self.verbose,
            callback=self.progress_callback,
        )
        reporter.start()

        try:
            enriched, stats = self._enrich_all(rows, run.source_column, index, reporter)
            output_headers = synthesize_headers(headers, enriched)
            csv_text = encode_csv(output_headers, enriched)
        except EnrichmentError as e:
            reporter.abort()
            return self._fail(run, e, log)
        except Exception as e:
            reporter.abort()
            return self._fail(
                run, InternalFailure(f"{type(e).__name__}: {e}"), log
            )

        run.matched = stats.matched
        run.unmatched = stats.unmatched
        run.transition(RunStatus.COMPLETED)
        reporter.finish(unmatched=stats.unmatched)
        log.info("enrichment_run.completed", headers=len(output_headers), **stats.to_dict())

        return EnrichmentOutcome(
            status=run.status,
            row_ceiling=self.row_ceiling,
            headers=output_headers,
            rows=enriched,
            matched=stats.matched,
            unmatched=stats.unmatched,
            csv_text=csv_text,
            stats=stats,
        )

    def _reject(self, run: EnrichmentRun, error: EnrichmentError, log) -> EnrichmentOutcome:
        run.transition(RunStatus.REJECTED, reason=str(error))
        log.warning(
            "enrichment_run.rejected",
            error_type=type(error).__name__,
            reason=str(error),
        )
        return EnrichmentOutcome(
            status=run.status,
            row_ceiling=self.row_ceiling,
            reason=str(error),
            error_type=type(error).__name__,
            row_index=error.row_index,
        )

    def _fail(self, run: EnrichmentRun, error: EnrichmentError, log) -> EnrichmentOutcome:
        run.transition(RunStatus.FAILED, reason=str(error))
        log.error(
            "enrichment_run.failed",
            error_type=type(error).__name__,
            reason=str(error),
            row_index=error.row_index,
        )
        return EnrichmentOutcome(
            status=run.status,
            row_ceiling=self.row_ceiling,
            reason=str(error),
            error_type=type(error).__name__,
            row_index=error.row_index,
        )

    # ------------------------------------------------------------------ #
    # Batch execution
    # ------------------------------------------------------------------ #

    def _batch_bounds(self, total: int) -> List[Tuple[int, int]]:
        return [
            (start, min(start + self.batch_size, total))
            for start in range(0, total, self.batch_size)
        ]

    def _raise_if_cancelled(self, row_index: int) -> None:
        if self.cancel_event.is_set():
            raise RunCancelled("Enrichment run was cancelled", row_index=row_index)

    def _enrich_all(
        self,
        rows: List[Dict[str, str]],
        source_column: str,
        index: DomainIndex,
        reporter: ProgressReporter,
    ) -> Tuple[List[EnrichedRow], EnrichmentStats]:
        """
        Enrich every row and return them in input order with combined stats.

        Raises:
            RunCancelled: If the cancel event was set between batches
            InternalFailure: If a row could not be enriched
        """
        buffer: List[Optional[EnrichedRow]] = [None] * len(rows)
        parts: List[EnrichmentStats] = []
        bounds = self._batch_bounds(len(rows))

        def work(start: int, stop: int) -> BatchResult:
            self._raise_if_cancelled(start)
            enriched, stats = enrich_batch(
                rows[start:stop], source_column, index, start_index=start
            )
            return start, enriched, stats

        def collect(result: BatchResult) -> None:
            start, enriched, stats = result
            buffer[start : start + len(enriched)] = enriched
            parts.append(stats)
            reporter.update(n=len(enriched), matched=stats.matched)

        if self.max_workers <= 1 or len(bounds) <= 1:
            for start, stop in bounds:
                collect(work(start, stop))
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures: Dict[Future, int] = {
                    executor.submit(work, start, stop): start for start, stop in bounds
                }
                try:
                    for future in as_completed(futures):
                        collect(future.result())
                except Exception:
                    for pending in futures:
                        pending.cancel()
                    raise

        return [row for row in buffer if row is not None], EnrichmentStats.combine(parts)
