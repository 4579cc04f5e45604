"""
Unit tests for EnrichmentRunController.

Covers every lifecycle path (completed, rejected, failed), ordering under
parallel execution, progress notifications and cooperative cancellation.
"""

import json
import logging
import threading
from typing import List
from unittest.mock import MagicMock

import pytest

from enrich_hub.domain.company_enrichment.models import (
    ENRICHMENT_COLUMNS,
    CompanyRecord,
    CompanySummary,
    RunStatus,
)
from enrich_hub.domain.company_enrichment.observability import EnrichmentStats
from enrich_hub.io.readers.csv_table import decode_csv
from enrich_hub.orchestration.run_controller import EnrichmentRunController


def _broken_company(domain: str) -> CompanyRecord:
    """Record that bypassed validation and carries unusable product data."""
    summary = CompanySummary.model_construct(product_types=5)
    return CompanyRecord.model_construct(domain=domain, summary=summary)


@pytest.mark.unit
class TestCompletedRun:
    def test_three_row_scenario(self, settings, companies, leads_csv) -> None:
        outcome = EnrichmentRunController(settings).submit(leads_csv, "Email", companies)

        assert outcome.status is RunStatus.COMPLETED
        assert outcome.matched == 2
        assert outcome.unmatched == 1
        assert [r.row_index for r in outcome.rows] == [0, 1, 2]
        assert outcome.rows[2].matched_domain == ""
        assert outcome.rows[0].matched_domain == "x.com"
        assert outcome.rows[1].matched_domain == "y.com"
        assert outcome.stats.total_rows == 3

    def test_headers_and_serialized_output(self, settings, companies, leads_csv) -> None:
        outcome = EnrichmentRunController(settings).submit(leads_csv, "Email", companies)

        assert outcome.headers == [
            "Name",
            "Email",
            "Notes",
            *[c for c in ENRICHMENT_COLUMNS if c != "Email"],
            "PRODUCT1",
            "PRODUCT2",
            "PRODUCT3",
        ]
        headers, rows = decode_csv(outcome.csv_text)
        assert headers == outcome.headers
        assert rows == outcome.as_records()
        assert rows[0]["Notes"] == "likes rings, gold"
        assert rows[2]["Notes"] == 'said "call later"'
        assert rows[1]["PRODUCT1"] == "mugs"
        assert rows[1]["PRODUCT2"] == ""

    def test_all_unmatched_is_a_success(self, settings, companies) -> None:
        outcome = EnrichmentRunController(settings).submit(
            "Site\nunknown.org\nnothing.net\n", "Site", companies
        )

        assert outcome.status is RunStatus.COMPLETED
        assert outcome.matched == 0
        assert outcome.unmatched == 2

    def test_run_accepts_decoded_rows(self, settings, companies) -> None:
        rows = [{"Site": "z.com"}, {"Site": "q.com"}]

        outcome = EnrichmentRunController(settings).run(["Site"], rows, "Site", companies)

        assert outcome.succeeded
        assert outcome.matched == 1
        assert rows == [{"Site": "z.com"}, {"Site": "q.com"}]

    def test_row_count_equal_to_ceiling_is_accepted(self, companies, leads_csv) -> None:
        controller = EnrichmentRunController(row_ceiling=3, batch_size=10)

        assert controller.submit(leads_csv, "Email", companies).succeeded

    def test_stats_are_enrichment_stats(self, settings, companies, leads_csv) -> None:
        outcome = EnrichmentRunController(settings).submit(leads_csv, "Email", companies)

        assert isinstance(outcome.stats, EnrichmentStats)
        assert outcome.stats.matched == outcome.matched

    def test_rows_longer_than_header_are_enriched(self, settings, companies) -> None:
        outcome = EnrichmentRunController(settings).submit(
            "Name,Email\nAnn,a@x.com\nBob,b@q.org,extra\n", "Email", companies
        )

        assert outcome.status is RunStatus.COMPLETED
        assert outcome.matched == 1
        assert outcome.unmatched == 1
        assert outcome.rows[1].values["Email"] == "b@q.org"
        assert "extra" not in outcome.csv_text

    def test_literal_headers_reach_output(self, settings, companies) -> None:
        outcome = EnrichmentRunController(settings).submit(
            "Email,,Email\nold@q.org,note,a@x.com\n", "Email", companies
        )

        assert outcome.succeeded
        assert outcome.headers[:2] == ["Email", ""]
        assert "Email.1" not in outcome.headers
        assert outcome.rows[0].matched_domain == "x.com"
        assert outcome.csv_text.startswith("Email,,")

    def test_run_events_logged_under_controller_module(
        self, settings, companies, leads_csv, caplog
    ) -> None:
        caplog.set_level(logging.INFO)

        EnrichmentRunController(settings).submit(leads_csv, "Email", companies)

        events = [
            json.loads(record.message)
            for record in caplog.records
            if record.name == "enrich_hub.orchestration.run_controller"
        ]
        started = next(e for e in events if e["event"] == "enrichment_run.started")
        assert started["logger"] == "enrich_hub.orchestration.run_controller"
        assert started["source_column"] == "Email"
        assert any(e["event"] == "enrichment_run.completed" for e in events)


@pytest.mark.unit
class TestRejectedRun:
    @pytest.mark.parametrize("column", [None, "", "   "])
    def test_no_source_column(self, settings, companies, leads_csv, column) -> None:
        outcome = EnrichmentRunController(settings).submit(leads_csv, column, companies)

        assert outcome.status is RunStatus.REJECTED
        assert outcome.error_type == "NoSourceColumnSelected"
        assert outcome.rows == []

    def test_unknown_source_column(self, settings, companies, leads_csv) -> None:
        outcome = EnrichmentRunController(settings).submit(leads_csv, "Website", companies)

        assert outcome.status is RunStatus.REJECTED
        assert outcome.error_type == "NoSourceColumnSelected"
        assert "Website" in outcome.reason

    @pytest.mark.parametrize("text", ["", "   \n", "Email\n"])
    def test_decode_errors(self, settings, companies, text) -> None:
        outcome = EnrichmentRunController(settings).submit(text, "Email", companies)

        assert outcome.status is RunStatus.REJECTED
        assert outcome.error_type == "DecodeError"

    def test_row_ceiling_exceeded(self, settings, companies, leads_csv) -> None:
        callback = MagicMock()
        controller = EnrichmentRunController(
            settings, row_ceiling=2, progress_callback=callback
        )

        outcome = controller.submit(leads_csv, "Email", companies)

        assert outcome.status is RunStatus.REJECTED
        assert outcome.error_type == "RowCeilingExceeded"
        assert outcome.row_ceiling == 2
        assert "Maximum 2 rows supported" in outcome.reason
        assert outcome.rows == []
        assert outcome.csv_text == ""
        callback.assert_not_called()

    def test_ceiling_defaults_to_settings(self, companies) -> None:
        from enrich_hub.config.settings import Settings

        controller = EnrichmentRunController(Settings(_env_file=None, row_ceiling=1))
        outcome = controller.submit("Site\na.com\nb.com\n", "Site", companies)

        assert outcome.error_type == "RowCeilingExceeded"

    @pytest.mark.parametrize(
        "records",
        [[], [CompanyRecord(name="no domain"), CompanyRecord(domain="  ")]],
    )
    def test_empty_reference_collection(self, settings, leads_csv, records) -> None:
        outcome = EnrichmentRunController(settings).submit(leads_csv, "Email", records)

        assert outcome.status is RunStatus.REJECTED
        assert outcome.error_type == "EmptyReferenceCollection"


@pytest.mark.unit
class TestFailedRun:
    def test_malformed_reference_data_fails_with_row_index(self, settings) -> None:
        companies = [CompanyRecord(domain="ok.com"), _broken_company("bad.com")]
        text = "Site\nok.com\nok.com\nbad.com\n"

        outcome = EnrichmentRunController(settings).submit(text, "Site", companies)

        assert outcome.status is RunStatus.FAILED
        assert outcome.error_type == "InternalFailure"
        assert outcome.row_index == 2
        assert "row_index=2" in outcome.reason
        assert outcome.rows == []
        assert outcome.headers == []
        assert outcome.csv_text == ""

    def test_failure_in_parallel_run_discards_output(self, companies) -> None:
        records = [*companies, _broken_company("bad.com")]
        rows = [{"Site": "x.com"} for _ in range(20)] + [{"Site": "bad.com"}]
        controller = EnrichmentRunController(max_workers=4, batch_size=3)

        outcome = controller.run(["Site"], rows, "Site", records)

        assert outcome.status is RunStatus.FAILED
        assert outcome.row_index == 20
        assert outcome.rows == []

    def test_cancelled_before_start(self, settings, companies, leads_csv) -> None:
        cancel = threading.Event()
        cancel.set()

        outcome = EnrichmentRunController(settings, cancel_event=cancel).submit(
            leads_csv, "Email", companies
        )

        assert outcome.status is RunStatus.FAILED
        assert outcome.error_type == "RunCancelled"
        assert outcome.rows == []

    def test_cancelled_between_batches(self, companies) -> None:
        cancel = threading.Event()
        seen: List[tuple] = []

        def on_progress(processed: int, total: int) -> None:
            seen.append((processed, total))
            cancel.set()

        controller = EnrichmentRunController(
            batch_size=2, progress_callback=on_progress, cancel_event=cancel
        )
        rows = [{"Site": "x.com"} for _ in range(6)]

        outcome = controller.run(["Site"], rows, "Site", companies)

        assert outcome.status is RunStatus.FAILED
        assert outcome.error_type == "RunCancelled"
        assert outcome.row_index == 2
        assert seen == [(2, 6)]
        assert outcome.csv_text == ""


@pytest.mark.unit
class TestBatchingAndProgress:
    def test_progress_reported_after_each_batch(self, settings, companies, leads_csv) -> None:
        callback = MagicMock()

        EnrichmentRunController(settings, progress_callback=callback).submit(
            leads_csv, "Email", companies
        )

        assert [c.args for c in callback.call_args_list] == [(2, 3), (3, 3)]

    def test_parallel_output_matches_sequential(self, companies) -> None:
        values = ["a@x.com", "https://y.com/p", "", "z.com", "nope.io", "WWW.X.COM"]
        rows = [{"id": str(i), "v": values[i % len(values)]} for i in range(97)]

        sequential = EnrichmentRunController(max_workers=1, batch_size=5).run(
            ["id", "v"], rows, "v", companies
        )
        parallel = EnrichmentRunController(max_workers=4, batch_size=5).run(
            ["id", "v"], rows, "v", companies
        )

        assert parallel.succeeded
        assert [r.row_index for r in parallel.rows] == list(range(97))
        assert parallel.csv_text == sequential.csv_text
        assert parallel.stats.to_dict() == sequential.stats.to_dict()
        assert parallel.matched == sequential.matched

    def test_controller_is_reusable(self, settings, companies, leads_csv) -> None:
        controller = EnrichmentRunController(settings)

        first = controller.submit(leads_csv, "Email", companies)
        second = controller.submit(leads_csv, "Email", companies)

        assert first.csv_text == second.csv_text
        assert first.matched == second.matched == 2
