"""
CSV codec tests: lenient decode, fixed-layout encode, export file.

Run with: pytest tests/unit/test_dataio.py -v
"""

import random
import re
from datetime import date

from nexatel.dataio import (
    EXPORT_HEADERS,
    RandomBackfill,
    export_csv,
    export_filename,
    load_roster,
    parse_csv,
    parse_csv_report,
    serialize_csv,
)


class TestParseEmptyInput:
    """Too little text means nothing to import, never an error."""

    def test_empty_string(self):
        assert parse_csv("") == []

    def test_header_only(self):
        assert parse_csv("header-only-line") == []

    def test_blank_lines_are_ignored(self):
        assert parse_csv("Customer ID,Tenure\n\n   \n") == []

    def test_report_is_empty(self):
        report = parse_csv_report("just,a,header\n")
        assert report.is_empty
        assert report.defaulted == {}
        assert report.coerced == {}


class TestParseDefaults:
    """Missing columns fall back to documented defaults."""

    def test_minimal_three_column_file(self, rng, clock):
        rows = parse_csv("Customer ID,Tenure,Monthly Charges\nC-1,10,50\n", rng=rng, clock=clock)

        assert len(rows) == 1
        c = rows[0]
        assert c.id == "C-1"
        assert c.tenure == 10
        assert c.monthly_charges == 50
        assert c.total_charges == 0
        assert c.churn is False
        assert c.contract == "Month-to-month"
        assert c.segment == "General"
        assert c.usage_gb == 0
        assert c.clv == 0
        assert c.last_activity_date == clock()
        assert 1 <= c.rfm_score <= 5

    def test_missing_id_gets_placeholder(self, rng):
        rows = parse_csv("Tenure\n5\n7\n", rng=rng)
        assert len(rows) == 2
        for c in rows:
            assert re.fullmatch(r"C-[0-9a-z]{5}", c.id)

    def test_utf8_bom_is_ignored(self, rng):
        rows = parse_csv("\ufeffCustomer ID,Tenure\nC-1,3\n", rng=rng)
        assert rows[0].id == "C-1"
        assert rows[0].tenure == 3

    def test_crlf_line_endings(self, rng):
        rows = parse_csv("Customer ID,Tenure\r\nC-1,3\r\nC-2,4\r\n", rng=rng)
        assert [(c.id, c.tenure) for c in rows] == [("C-1", 3), ("C-2", 4)]

    def test_short_row_leaves_trailing_fields_missing(self, rng):
        rows = parse_csv("Customer ID,Tenure,Segment\nC-1\n", rng=rng)
        assert rows[0].tenure == 0
        assert rows[0].segment == "General"

    def test_report_counts_defaults(self, rng):
        report = parse_csv_report("Customer ID,Tenure\nC-1,3\nC-2,4\n", rng=rng)
        assert report.defaulted["segment"] == 2
        assert report.defaulted["rfm_score"] == 2
        assert report.defaulted["monthly_charges"] == 2
        assert "id" not in report.defaulted
        assert "tenure" not in report.defaulted


class TestHeaderSynonyms:
    """Headers are normalized and resolved in priority order."""

    def test_headers_trimmed_lowercased_dequoted(self, rng):
        rows = parse_csv(' "CUSTOMER ID" , \'Monthly\' \nC-9,19.5\n', rng=rng)
        assert rows[0].id == "C-9"
        assert rows[0].monthly_charges == 19.5

    def test_customer_id_beats_id(self, rng):
        rows = parse_csv("id,customer id\nX,Y\n", rng=rng)
        assert rows[0].id == "Y"

    def test_empty_cell_falls_through_to_next_synonym(self, rng):
        rows = parse_csv("customer id,id\n,Z\n", rng=rng)
        assert rows[0].id == "Z"

    def test_export_style_headers(self, rng):
        text = (
            "Tenure (Months),Total Charges,Contract Type,Usage (GB),Last Activity,Churned\n"
            "24,1200.5,One year,300,2024-01-05,Yes\n"
        )
        c = parse_csv(text, rng=rng)[0]
        assert c.tenure == 24
        assert c.total_charges == 1200.5
        assert c.contract == "One year"
        assert c.usage_gb == 300
        assert c.last_activity_date == date(2024, 1, 5)
        assert c.churn is True


class TestParseCoercion:
    """Malformed values are coerced, counted and never raised."""

    def test_non_numeric_becomes_zero(self, rng):
        report = parse_csv_report("Customer ID,Tenure,Monthly Charges\nC-1,abc,n/a\n", rng=rng)
        c = report.records[0]
        assert c.tenure == 0
        assert c.monthly_charges == 0
        assert report.coerced == {"tenure": 1, "monthly_charges": 1}

    def test_numeric_prefix_is_kept(self, rng):
        c = parse_csv("Customer ID,Tenure,Monthly Charges\nC-1,12.7,49.99USD\n", rng=rng)[0]
        assert c.tenure == 12
        assert c.monthly_charges == 49.99

    def test_negative_numbers_clamped(self, rng):
        report = parse_csv_report("Customer ID,Tenure,Total Charges\nC-1,-3,-10\n", rng=rng)
        assert report.records[0].tenure == 0
        assert report.records[0].total_charges == 0
        assert report.coerced["tenure"] == 1

    def test_contract_matched_case_insensitively(self, rng):
        c = parse_csv("Customer ID,Contract\nC-1,two YEAR\n", rng=rng)[0]
        assert c.contract == "Two year"

    def test_unknown_contract_defaults(self, rng):
        report = parse_csv_report("Customer ID,Contract\nC-1,Weekly\n", rng=rng)
        assert report.records[0].contract == "Month-to-month"
        assert report.coerced["contract"] == 1

    def test_bad_date_uses_clock(self, rng, clock):
        report = parse_csv_report("Customer ID,Last Activity\nC-1,last tuesday\n", rng=rng, clock=clock)
        assert report.records[0].last_activity_date == clock()
        assert report.coerced["last_activity_date"] == 1

    def test_timestamp_keeps_date_part(self, rng):
        c = parse_csv("Customer ID,Last Activity\nC-1,2024-02-29T10:00:00Z\n", rng=rng)[0]
        assert c.last_activity_date == date(2024, 2, 29)

    def test_quotes_removed_from_values(self, rng):
        c = parse_csv("Customer ID,Contract Type,Segment\n'C-1',\"One year\",\"Big Spenders\"\n", rng=rng)[0]
        assert c.id == "C-1"
        assert c.contract == "One year"
        assert c.segment == "Big Spenders"

    def test_overlong_digit_run_becomes_zero(self, rng):
        report = parse_csv_report("Customer ID,Tenure\nC-1," + "9" * 5000 + "\n", rng=rng)
        assert report.records[0].tenure == 0
        assert report.coerced["tenure"] == 1

    def test_overlong_decimal_is_coerced(self, rng):
        report = parse_csv_report("Customer ID,Monthly Charges\nC-1," + "9" * 5000 + "\n", rng=rng)
        assert report.records[0].monthly_charges == 0
        assert report.coerced["monthly_charges"] == 1

    def test_quoted_comma_splits_field(self, rng):
        # fields are split on every comma, quotes or not
        c = parse_csv('Customer ID,Segment,Tenure\nC-1,"At, Risk",5\n', rng=rng)[0]
        assert c.segment == "At"
        assert c.tenure == 0


class TestChurnFlag:

    def test_yes_any_case(self, rng):
        rows = parse_csv("Customer ID,Churn\nA,Yes\nB,YES\nC,yes\n", rng=rng)
        assert all(c.churn for c in rows)

    def test_literal_true(self, rng):
        assert parse_csv("Customer ID,Churn\nA,true\n", rng=rng)[0].churn is True

    def test_other_values_are_false(self, rng):
        rows = parse_csv("Customer ID,Churn\nA,No\nB,1\nC,False\nD,\n", rng=rng)
        assert [c.churn for c in rows] == [False, False, False, False]


class TestClvAndRfm:

    def test_explicit_clv(self, rng):
        c = parse_csv("Customer ID,Total Charges,CLV\nC-1,1000,750.25\n", rng=rng)[0]
        assert c.clv == 750.25

    def test_clv_derived_from_total(self, rng):
        c = parse_csv("Customer ID,Total Charges\nC-1,123.456\n", rng=rng)[0]
        assert c.clv == 49.38

    def test_zero_clv_is_derived(self, rng):
        c = parse_csv("Customer ID,Total Charges,CLV\nC-1,1000,0\n", rng=rng)[0]
        assert c.clv == 400

    def test_explicit_rfm(self, rng):
        c = parse_csv("Customer ID,RFM Score\nC-1,4\n", rng=rng)[0]
        assert c.rfm_score == 4

    def test_rfm_backfill_is_seedable(self):
        text = "Customer ID\n" + "\n".join(f"C-{i}" for i in range(20))
        first = [c.rfm_score for c in parse_csv(text, rng=random.Random(7))]
        second = [c.rfm_score for c in parse_csv(text, rng=random.Random(7))]
        assert first == second
        assert all(1 <= s <= 5 for s in first)

    def test_custom_backfill_strategy(self):
        class FixedBackfill(RandomBackfill):
            def rfm_score(self, row):
                return 3

            def customer_id(self):
                return "C-fixed"

        c = parse_csv("Tenure\n1\n", backfill=FixedBackfill())[0]
        assert c.rfm_score == 3
        assert c.id == "C-fixed"


class TestSerialize:

    def test_empty_roster(self):
        assert serialize_csv([]) == ""

    def test_layout(self, make_customer):
        text = serialize_csv([make_customer(), make_customer(id="CUST-1001", churn=True, monthly_charges=70.5)])
        lines = text.split("\n")

        assert lines[0] == ",".join(EXPORT_HEADERS)
        assert lines[0].startswith("Customer ID,Tenure (Months),Monthly Charges")
        assert lines[1] == 'CUST-1000,12,70,840,"Month-to-month",120,2024-03-15,336,"Loyal Customers",No'
        assert lines[2].split(",")[2] == "70.5"
        assert lines[2].endswith(",Yes")
        assert not text.endswith("\n")

    def test_round_trip_keeps_values(self, make_customer, rng):
        original = [
            make_customer(),
            make_customer(id="CUST-2", tenure=60, monthly_charges=99.95, total_charges=5997.13,
                          churn=True, contract="Two year", usage_gb=0, clv=2398.85,
                          segment="Champions", last_activity_date=date(2023, 12, 31)),
        ]
        decoded = parse_csv(serialize_csv(original), rng=rng)

        assert len(decoded) == len(original)
        for a, b in zip(original, decoded):
            assert b.id == a.id
            assert b.tenure == a.tenure
            assert b.monthly_charges == a.monthly_charges
            assert b.total_charges == a.total_charges
            assert b.churn == a.churn
            assert b.usage_gb == a.usage_gb
            assert b.clv == a.clv
            assert b.last_activity_date == a.last_activity_date
            assert b.contract == a.contract
            assert b.segment == a.segment
            assert '"' not in b.segment


class TestExport:

    def test_filename_uses_clock(self, clock):
        assert export_filename(clock) == "NexaTel_Export_2024-03-15.csv"

    def test_empty_roster_writes_nothing(self, tmp_path, clock):
        assert export_csv([], directory=str(tmp_path), clock=clock) is None
        assert list(tmp_path.iterdir()) == []

    def test_writes_file(self, tmp_path, clock, make_customer):
        rows = [make_customer()]
        path = export_csv(rows, directory=str(tmp_path / "out"), clock=clock)

        assert path is not None
        assert path.endswith("NexaTel_Export_2024-03-15.csv")
        with open(path, encoding="utf-8") as f:
            assert f.read() == serialize_csv(rows)


class TestLoadRoster:

    def test_reads_excel_bom_file(self, tmp_path, rng):
        p = tmp_path / "excel.csv"
        p.write_text("Customer ID,Tenure\nC-7,9\n", encoding="utf-8-sig")
        assert [c.id for c in load_roster(str(p), rng=rng)] == ["C-7"]

    def test_missing_file(self, tmp_path):
        assert load_roster(str(tmp_path / "nope.csv")) == []

    def test_reads_file(self, tmp_path, rng):
        p = tmp_path / "customers.csv"
        p.write_text("Customer ID,Tenure,Segment\nC-1,3,Champions\nC-2,4,At Risk\n", encoding="utf-8")
        rows = load_roster(str(p), rng=rng)
        assert [c.id for c in rows] == ["C-1", "C-2"]
