"""
Unit tests for the command-line interface.
"""

from pathlib import Path

import pytest

from enrich_hub.cli.__main__ import main
from enrich_hub.io.readers.csv_table import decode_csv


@pytest.fixture
def leads_file(tmp_path: Path, leads_csv: str) -> Path:
    path = tmp_path / "leads.csv"
    path.write_text(leads_csv, encoding="utf-8")
    return path


@pytest.mark.unit
class TestEnrichCommand:
    def test_writes_enriched_csv(self, tmp_path, leads_file, companies_file, capsys) -> None:
        out_dir = tmp_path / "out"

        code = main(
            [
                "enrich",
                "--input", str(leads_file),
                "--column", "Email",
                "--companies", str(companies_file),
                "--output-dir", str(out_dir),
            ]
        )

        assert code == 0
        outputs = list(out_dir.glob("enriched_*.csv"))
        assert len(outputs) == 1
        headers, rows = decode_csv(outputs[0].read_text(encoding="utf-8"))
        assert "Matched Domain" in headers
        assert [r["Matched Domain"] for r in rows] == ["x.com", "y.com", ""]
        assert "Matched 2 companies, 1 unmatched" in capsys.readouterr().out

    def test_exports_unmatched_domains(self, tmp_path, companies_file) -> None:
        leads = tmp_path / "leads.csv"
        leads.write_text("Site\nx.com\ngone.com\ngone.com\n", encoding="utf-8")
        out_dir = tmp_path / "out"

        code = main(
            [
                "enrich",
                "--input", str(leads),
                "--column", "Site",
                "--companies", str(companies_file),
                "--output-dir", str(out_dir),
                "--workers", "2",
                "--export-unmatched",
            ]
        )

        assert code == 0
        reports = list(out_dir.glob("unmatched_domains_*.csv"))
        assert len(reports) == 1
        assert "gone.com,2" in reports[0].read_text(encoding="utf-8")

    def test_rejected_run_returns_one(self, tmp_path, leads_file, companies_file, capsys) -> None:
        code = main(
            [
                "enrich",
                "--input", str(leads_file),
                "--column", "Website",
                "--companies", str(companies_file),
                "--output-dir", str(tmp_path / "out"),
            ]
        )

        assert code == 1
        assert "rejected" in capsys.readouterr().err
        assert not (tmp_path / "out").exists()

    def test_missing_companies_file_returns_one(self, tmp_path, leads_file) -> None:
        code = main(
            [
                "enrich",
                "--input", str(leads_file),
                "--column", "Email",
                "--companies", str(tmp_path / "missing.json"),
            ]
        )

        assert code == 1

    def test_missing_required_argument_is_usage_error(self, leads_file) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["enrich", "--input", str(leads_file)])

        assert exc_info.value.code == 2


@pytest.mark.unit
class TestDomainsCommand:
    def test_writes_unique_domains(self, tmp_path, capsys) -> None:
        source = tmp_path / "export.csv"
        source.write_text(
            "URL\nhttps://www.b.com/x\na.com\nb.com\nhttps://twitter.com/a\n\n",
            encoding="utf-8",
        )
        out_dir = tmp_path / "out"

        code = main(
            ["domains", "--input", str(source), "--column", "URL", "--output-dir", str(out_dir)]
        )

        assert code == 0
        outputs = list(out_dir.glob("unique-domains_*.csv"))
        assert len(outputs) == 1
        assert outputs[0].read_text(encoding="utf-8") == "Domain\na.com\nb.com\n"
        assert "Found 2 unique domains from 4 total entries" in capsys.readouterr().out

    def test_unknown_column_returns_one(self, tmp_path) -> None:
        source = tmp_path / "export.csv"
        source.write_text("URL\na.com\n", encoding="utf-8")

        assert main(["domains", "--input", str(source), "--column", "Site"]) == 1

    def test_unknown_command_is_usage_error(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["bogus"])

        assert exc_info.value.code == 2
