"""Tests for numeric normalization and contract validation."""

import pytest

from gasdoc.errors import SchemaValidationError
from gasdoc.registry import lookup
from gasdoc.schemas import DocumentType
from gasdoc.validation import EMPTY_ROWS_CONFIDENCE_CAP, build_record, parse_number


class TestParseNumber:

    def test_thousands_separators_are_stripped(self):
        assert parse_number("52,417,002.59") == 52417002.59

    def test_integer_text_stays_integer(self):
        value = parse_number("3,552,567")
        assert value == 3552567
        assert isinstance(value, int)

    @pytest.mark.parametrize("text, expected", [
        ("$52,417,002.59", 52417002.59),
        ("US$ 8,914,559.99", 8914559.99),
        ("2,587,457,630.82 THB", 2587457630.82),
        ("฿1,000", 1000),
        ("9,197,256.21 MMBTU", 9197256.21),
        ("(1,250.50)", -1250.5),
        ("  -42.0 ", -42.0),
        (".5", 0.5),
    ])
    def test_formatted_text(self, text, expected):
        assert parse_number(text) == expected

    def test_numbers_pass_through(self):
        assert parse_number(14952366.0) == 14952366.0
        assert parse_number(7) == 7

    @pytest.mark.parametrize("value", ["abc", "1.2.3", "", True, None, [1], float("nan")])
    def test_rejects_non_numbers(self, value):
        with pytest.raises(ValueError):
            parse_number(value)

    @pytest.mark.parametrize("text", ["1 2", "1.234,56", "12,34", "1,2345", "1,,000", ",100", "9 580 877"])
    def test_rejects_misplaced_separators(self, text):
        with pytest.raises(ValueError):
            parse_number(text)

    def test_grouped_thousands_with_decimals(self):
        assert parse_number("14,952,366.000") == 14952366.0
        assert parse_number("1,000") == 1000


class TestBuildRecord:

    def test_valid_single_record(self):
        entry = lookup(DocumentType.FIELD_PURCHASE_INVOICE)
        record = build_record(entry, {
            "field_name": "C5",
            "heat_quantity_mmbtu": "1,203,441.50",
            "amountUSD": "9,862,110.37",
            "overall_confidence_score": 88,
            "unexpected": "dropped",
        })

        assert record.fields["amountUSD"] == 9862110.37
        assert record.fields["vendor"] is None
        assert "unexpected" not in record.fields
        assert record.overall_confidence == 88
        assert record.rows == []

    def test_missing_required_field_is_named(self):
        entry = lookup(DocumentType.FIELD_PURCHASE_INVOICE)
        with pytest.raises(SchemaValidationError) as exc_info:
            build_record(entry, {"field_name": "C5", "heat_quantity_mmbtu": 1.0})

        assert exc_info.value.field_name == "amountUSD"
        assert "amountUSD" in str(exc_info.value)

    def test_type_mismatch_reports_expected_and_observed(self):
        entry = lookup(DocumentType.FIELD_PURCHASE_INVOICE)
        with pytest.raises(SchemaValidationError) as exc_info:
            build_record(entry, {"field_name": "C5", "heat_quantity_mmbtu": 1.0, "amountUSD": "n/a"})

        assert exc_info.value.field_name == "amountUSD"
        assert exc_info.value.expected == "number"
        assert exc_info.value.observed == "n/a"

    def test_string_field_rejects_numbers(self):
        entry = lookup(DocumentType.FIELD_PURCHASE_INVOICE)
        with pytest.raises(SchemaValidationError, match="field_name"):
            build_record(entry, {"field_name": 5, "heat_quantity_mmbtu": 1.0, "amountUSD": 2.0})

    def test_blank_required_string_is_missing(self):
        entry = lookup(DocumentType.MULTI_VENDOR_PLATFORM_INVOICE)
        with pytest.raises(SchemaValidationError, match="platform"):
            build_record(entry, {"platform": "   ", "vendor_invoices": []})

    def test_optional_default_applies(self):
        entry = lookup(DocumentType.YETAGUN_SUPPLY_SUMMARY)
        record = build_record(entry, {"overall_payment_due_usd": "8,914,559.99"})

        assert record.fields == {"sub_total_mmbtu": 0, "overall_payment_due_usd": 8914559.99}

    def test_rows_are_validated_independently(self):
        entry = lookup(DocumentType.JDA_PLATFORM_SUMMARY)
        record = build_record(entry, {
            "periodLabel": "Aug-25",
            "platforms": [
                {"platform": "JDA A-18", "mmbtu": "9,197,256.21", "amountUSD": "52,417,002.59",
                 "mmscf": "10,411.79", "confidenceScore": 95},
                {"platform": "JDA B-17", "mmbtu": "1,868,601.00"},
                {"platform": "JDA B-17", "mmbtu": 1868601.0, "amountUSD": 11917002.88},
            ],
            "overallConfidenceScore": 90,
        })

        assert [row["platform"] for row in record.rows] == ["JDA A-18", "JDA B-17"]
        assert record.rows[0]["amountUSD"] == 52417002.59
        assert record.rows[1]["mmscf"] is None
        assert record.row_confidences == [95.0, 90.0]
        assert len(record.rejected_rows) == 1
        assert "platforms[1]" in record.rejected_rows[0]
        assert "amountUSD" in record.rejected_rows[0]

    def test_zero_valid_rows_caps_confidence(self):
        entry = lookup(DocumentType.SINGLE_PLATFORM_STATEMENT)
        record = build_record(entry, {
            "statements": [{"statement_number": "Statement No. 08-18/2025"}, "garbage"],
            "overall_confidence_score": 96,
        })

        assert record.rows == []
        assert record.overall_confidence <= EMPTY_ROWS_CONFIDENCE_CAP
        assert len(record.rejected_rows) == 2

    def test_empty_rows_keep_lower_confidence(self):
        entry = lookup(DocumentType.SINGLE_PLATFORM_STATEMENT)
        record = build_record(entry, {"statements": [], "overall_confidence_score": 5})

        assert record.overall_confidence == 5

    def test_confidence_is_clamped(self):
        entry = lookup(DocumentType.ZAWTIKA_SELLER_SPLIT)
        record = build_record(entry, {
            "moge_quantity_mmbtu": 1, "pttepi_quantity_mmbtu": 2,
            "moge_payment_usd": 3, "pttepi_payment_usd": 4,
            "overall_confidence_score": 140,
        })

        assert record.overall_confidence == 100

    def test_rows_must_be_a_list(self):
        entry = lookup(DocumentType.SINGLE_PLATFORM_STATEMENT)
        with pytest.raises(SchemaValidationError, match="statements"):
            build_record(entry, {"statements": {"statement_number": "x"}})

    def test_record_must_be_a_mapping(self):
        with pytest.raises(SchemaValidationError):
            build_record(lookup(DocumentType.ZAWTIKA_SELLER_SPLIT), ["not", "a", "dict"])
