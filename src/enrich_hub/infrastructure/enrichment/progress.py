"""
Progress reporting for enrichment runs.

Features:
- Optional tqdm progress bar showing processed/total rows
- Advisory ``(processed, total)`` callback for callers such as a web UI
- ETA based on average processing time per row
- Structured completion log with match statistics

Progress is advisory only: it never influences row order or results.
"""

import time
from typing import Callable, Optional

from tqdm import tqdm

from enrich_hub.utils.logging import get_logger

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int], None]


class ProgressReporter:
    """
    Progress reporter for enrichment runs.

    Usage:
        >>> reporter = ProgressReporter(total_rows=2500)
        >>> reporter.start()
        >>> reporter.update(n=1000, matched=870)
        >>> reporter.finish()
    """

    def __init__(
        self,
        total_rows: int,
        verbose: bool = False,
        desc: str = "Enriching rows",
        callback: Optional[ProgressCallback] = None,
    ) -> None:
        """
        Initialize progress reporter.

        Args:
            total_rows: Total number of rows to process.
            verbose: Whether to show a tqdm progress bar.
            desc: Description for progress bar.
            callback: Called with (processed, total) after every update.
        """
        self.total_rows = total_rows
        self.verbose = verbose
        self.desc = desc
        self.callback = callback

        self.processed = 0
        self.matched = 0

        self.start_time: Optional[float] = None

        self._pbar: Optional[tqdm] = None

    def start(self) -> None:
        """Start progress tracking."""
        self.start_time = time.time()

        if self.verbose:
            self._pbar = tqdm(
                total=self.total_rows,
                desc=self.desc,
                unit="row",
                ncols=100,
            )

    def update(self, n: int = 1, matched: int = 0) -> None:
        """
        Record ``n`` more processed rows, ``matched`` of them matched.

        Callback errors are logged and swallowed; a broken progress consumer
        must not abort the run.
        """
        self.processed += n
        self.matched += matched

        if self._pbar:
            self._pbar.update(n)
            self._pbar.set_postfix_str(f"Matched: {self.match_rate:.1%}")

        logger.debug(
            "enrichment_run.progress",
            processed=self.processed,
            total=self.total_rows,
        )

        if self.callback is not None:
            try:
                self.callback(self.processed, self.total_rows)
            except Exception as e:
                logger.warning("enrichment_run.progress_callback_failed", error=str(e))

    def finish(self, unmatched: Optional[int] = None) -> None:
        """Close the progress bar and log final statistics."""
        if self._pbar:
            self._pbar.close()
            self._pbar = None

        elapsed = self._elapsed_seconds()
        logger.info(
            "enrichment_run.rows_processed",
            total_rows=self.total_rows,
            processed_rows=self.processed,
            matched=self.matched,
            unmatched=self.processed - self.matched if unmatched is None else unmatched,
            match_rate=f"{self.match_rate:.1%}",
            elapsed_seconds=f"{elapsed:.2f}",
            avg_time_per_row=f"{elapsed / self.processed:.6f}"
            if self.processed > 0
            else "N/A",
        )

    def abort(self) -> None:
        """Close the progress bar without logging completion."""
        if self._pbar:
            self._pbar.close()
            self._pbar = None

    def _elapsed_seconds(self) -> float:
        if self.start_time is None:
            return 0.0
        return time.time() - self.start_time

    def eta_seconds(self) -> float:
        """
        Estimated time remaining.

        Returns:
            ETA in seconds, or 0 if it cannot be calculated yet.
        """
        if self.start_time is None or self.processed == 0:
            return 0.0

        avg_time_per_row = self._elapsed_seconds() / self.processed
        return avg_time_per_row * max(self.total_rows - self.processed, 0)

    @property
    def match_rate(self) -> float:
        """Matched rows as a fraction of processed rows (0.0 to 1.0)."""
        return self.matched / self.processed if self.processed > 0 else 0.0
