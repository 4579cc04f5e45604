"""
Unit tests for the JSON reference collection provider.
"""

import json
from pathlib import Path

import pytest

from enrich_hub.io.readers.company_reader import (
    CompanyRecordsLoadError,
    load_company_records,
    parse_company_records,
)


@pytest.mark.unit
class TestParseCompanyRecords:
    def test_accepts_plain_list(self) -> None:
        records = parse_company_records([{"domain": "a.com"}, {"domain": "b.com"}])
        assert [r.domain for r in records] == ["a.com", "b.com"]

    def test_accepts_companies_wrapper(self) -> None:
        records = parse_company_records({"companies": [{"domain": "a.com"}]})
        assert records[0].domain == "a.com"

    @pytest.mark.parametrize("payload", [{"items": []}, "a.com", 3, None])
    def test_rejects_wrong_shape(self, payload) -> None:
        with pytest.raises(CompanyRecordsLoadError):
            parse_company_records(payload)

    def test_reports_position_of_invalid_item(self) -> None:
        payload = [{"domain": "a.com"}, {"domain": "b.com", "summary": "not an object"}]

        with pytest.raises(CompanyRecordsLoadError, match="position 1"):
            parse_company_records(payload)


@pytest.mark.unit
class TestLoadCompanyRecords:
    def test_loads_file(self, companies_file: Path) -> None:
        records = load_company_records(companies_file)

        assert len(records) == 4
        assert records[1].instagram == "@ygoods"
        assert records[0].summary.product_types == ["rings", "necklaces", "bracelets"]

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_company_records(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(CompanyRecordsLoadError, match="Invalid JSON"):
            load_company_records(path)

    def test_empty_list_is_valid(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.json"
        path.write_text(json.dumps([]), encoding="utf-8")

        assert load_company_records(path) == []
