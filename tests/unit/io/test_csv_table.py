"""
Unit tests for the CSV table codec.
"""

import pytest

from enrich_hub.domain.company_enrichment.exceptions import DecodeError
from enrich_hub.domain.company_enrichment.models import EnrichedRow
from enrich_hub.io.readers.csv_table import decode_csv, encode_csv


@pytest.mark.unit
class TestDecodeCsv:
    def test_headers_and_rows_as_text(self) -> None:
        headers, rows = decode_csv("Name,Zip,Score\nAnn,00123,NA\n")

        assert headers == ["Name", "Zip", "Score"]
        assert rows == [{"Name": "Ann", "Zip": "00123", "Score": "NA"}]

    def test_quoted_fields(self) -> None:
        text = 'Name,Notes\nAnn,"likes rings, gold"\nBob,"said ""hi""\nthen left"\n'

        _, rows = decode_csv(text)

        assert rows[0]["Notes"] == "likes rings, gold"
        assert rows[1]["Notes"] == 'said "hi"\nthen left'

    def test_short_rows_padded_and_blank_lines_skipped(self) -> None:
        headers, rows = decode_csv("A,B,C\n1,2\n\n4,5,6\n")

        assert rows == [{"A": "1", "B": "2", "C": ""}, {"A": "4", "B": "5", "C": "6"}]

    def test_strips_byte_order_mark(self) -> None:
        headers, _ = decode_csv("\ufeffEmail\na@x.com\n")
        assert headers == ["Email"]

    @pytest.mark.parametrize("text", ["", "   \n\n", None])
    def test_empty_input_raises(self, text) -> None:
        with pytest.raises(DecodeError):
            decode_csv(text)

    def test_header_without_rows_raises(self) -> None:
        with pytest.raises(DecodeError):
            decode_csv("Name,Email\n")

    def test_long_rows_truncated_to_header_width(self) -> None:
        headers, rows = decode_csv("Name,Email\nAnn,a@x.com\nBob,b@y.com,extra,more\n")

        assert headers == ["Name", "Email"]
        assert rows == [
            {"Name": "Ann", "Email": "a@x.com"},
            {"Name": "Bob", "Email": "b@y.com"},
        ]

    def test_header_names_kept_literally(self) -> None:
        headers, rows = decode_csv("Email,,Score\na@x.com,1,2\n")

        assert headers == ["Email", "", "Score"]
        assert rows == [{"Email": "a@x.com", "": "1", "Score": "2"}]

    def test_duplicate_header_keeps_first_position_and_last_value(self) -> None:
        headers, rows = decode_csv("Email,Name,Email\na@x.com,Ann,b@y.com\nc@z.com,Bob\n")

        assert headers == ["Email", "Name"]
        assert rows == [
            {"Email": "b@y.com", "Name": "Ann"},
            {"Email": "", "Name": "Bob"},
        ]

    def test_blank_header_round_trips(self) -> None:
        headers, rows = decode_csv("Email,\na@x.com,note\n")

        assert decode_csv(encode_csv(headers, rows)) == (headers, rows)


@pytest.mark.unit
class TestEncodeCsv:
    def test_missing_cells_are_empty(self) -> None:
        text = encode_csv(["A", "B"], [{"A": "1"}])
        assert text == "A,B\n1,\n"

    def test_accepts_enriched_rows(self) -> None:
        row = EnrichedRow(row_index=0, values={"A": "x", "B": "y"}, matched=False)
        assert encode_csv(["B", "A"], [row]) == "B,A\ny,x\n"

    def test_round_trip_with_delimiters_and_quotes(self) -> None:
        headers = ["Name", "Product Types", "Notes", "Empty"]
        rows = [
            {
                "Name": "Ann",
                "Product Types": "rings, necklaces, and bracelets",
                "Notes": 'She said "call me"\nnext week',
                "Empty": "",
            },
            {"Name": "007", "Product Types": "NA", "Notes": "null", "Empty": ""},
        ]

        decoded_headers, decoded_rows = decode_csv(encode_csv(headers, rows))

        assert decoded_headers == headers
        assert decoded_rows == rows
