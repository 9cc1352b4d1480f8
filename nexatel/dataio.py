"""CSV import/export for the customer roster.

Decoding is deliberately lenient: it never raises. Missing or malformed
fields fall back to defaults and are counted on the returned ImportReport.
"""
import os
import random
import re
import string
from collections import Counter
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from nexatel.config import settings
from nexatel.logger import get_logger
from nexatel.schemas import (
    CONTRACT_TYPES,
    DEFAULT_CONTRACT,
    DEFAULT_SEGMENT,
    Customer,
    ImportReport,
    RawCustomerRow,
)

logger = get_logger(__name__)

Clock = Callable[[], date]

# field -> accepted (normalized) header names, highest priority first
HEADER_SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "id": ("customer id", "id"),
    "tenure": ("tenure", "tenure (months)"),
    "monthly_charges": ("monthly charges", "monthly"),
    "total_charges": ("total charges", "total"),
    "churn": ("churn", "churned"),
    "contract": ("contract type", "contract"),
    "usage_gb": ("usage (gb)", "usage"),
    "last_activity_date": ("last activity", "lastactivitydate"),
    "clv": ("clv",),
    "rfm_score": ("rfm score",),
    "segment": ("segment",),
}

EXPORT_HEADERS = [
    "Customer ID", "Tenure (Months)", "Monthly Charges", "Total Charges",
    "Contract Type", "Usage (GB)", "Last Activity", "CLV", "Segment", "Churned",
]

CLV_FROM_TOTAL = 0.4

_QUOTES = re.compile(r"[\"']")
_INT_PREFIX = re.compile(r"^[+-]?\d+")
_FLOAT_PREFIX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_ID_ALPHABET = string.digits + string.ascii_lowercase


# ---------- backfill strategy ----------
class RandomBackfill:
    """
    Placeholder values for columns an import did not supply.
    Swap in a different strategy (e.g. a real RFM model) via parse_csv(backfill=...).
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def customer_id(self) -> str:
        return "C-" + "".join(self.rng.choice(_ID_ALPHABET) for _ in range(5))

    def rfm_score(self, row: RawCustomerRow) -> int:
        return self.rng.randint(1, 5)

    def clv(self, total_charges: float) -> float:
        return round(total_charges * CLV_FROM_TOTAL, 2)


# ---------- field coercion ----------
class _Tally:
    def __init__(self):
        self.defaulted: Counter = Counter()
        self.coerced: Counter = Counter()


def _clean(value: str) -> str:
    return _QUOTES.sub("", value.strip())


def _to_int(raw: Optional[str], field: str, tally: _Tally) -> int:
    if raw is None:
        tally.defaulted[field] += 1
        return 0
    m = _INT_PREFIX.match(raw)
    if not m:
        tally.coerced[field] += 1
        return 0
    try:
        n = int(m.group())
    except ValueError:  # digit run longer than the int-string limit
        tally.coerced[field] += 1
        return 0
    if n < 0:
        tally.coerced[field] += 1
        return 0
    return n


def _to_float(raw: Optional[str], field: str, tally: _Tally) -> float:
    if raw is None:
        tally.defaulted[field] += 1
        return 0.0
    m = _FLOAT_PREFIX.match(raw)
    if not m:
        tally.coerced[field] += 1
        return 0.0
    x = float(m.group())
    if x < 0 or x != x or x in (float("inf"), float("-inf")):
        tally.coerced[field] += 1
        return 0.0
    return x


def _to_contract(raw: Optional[str], tally: _Tally) -> str:
    if raw is None:
        tally.defaulted["contract"] += 1
        return DEFAULT_CONTRACT
    for ct in CONTRACT_TYPES:
        if raw.lower() == ct.lower():
            return ct
    tally.coerced["contract"] += 1
    return DEFAULT_CONTRACT


def _to_date(raw: Optional[str], clock: Clock, tally: _Tally) -> date:
    if raw is None:
        tally.defaulted["last_activity_date"] += 1
        return clock()
    try:
        # accept full ISO timestamps, keep the date part only
        return date.fromisoformat(raw[:10])
    except ValueError:
        tally.coerced["last_activity_date"] += 1
        return clock()


# ---------- decode ----------
def _resolve(entry: Dict[str, str]) -> RawCustomerRow:
    values = {}
    for field, names in HEADER_SYNONYMS.items():
        for name in names:
            v = entry.get(name)
            if v:  # empty cells fall through to the next synonym
                values[field] = v
                break
    return RawCustomerRow(**values)


def _to_customer(row: RawCustomerRow, backfill: RandomBackfill, clock: Clock, tally: _Tally) -> Customer:
    cid = row.id
    if cid is None:
        tally.defaulted["id"] += 1
        cid = backfill.customer_id()

    total = _to_float(row.total_charges, "total_charges", tally)

    clv = _to_float(row.clv, "clv", tally) if row.clv is not None else 0.0
    if not clv:
        if row.clv is None:
            tally.defaulted["clv"] += 1
        clv = backfill.clv(total)

    rfm = _to_int(row.rfm_score, "rfm_score", tally) if row.rfm_score is not None else 0
    if not rfm:
        if row.rfm_score is None:
            tally.defaulted["rfm_score"] += 1
        rfm = backfill.rfm_score(row)

    churn_raw = row.churn or ""
    if row.segment is None:
        tally.defaulted["segment"] += 1

    return Customer(
        id=cid,
        tenure=_to_int(row.tenure, "tenure", tally),
        monthly_charges=_to_float(row.monthly_charges, "monthly_charges", tally),
        total_charges=total,
        churn=churn_raw.lower() == "yes" or churn_raw == "true",
        contract=_to_contract(row.contract, tally),
        usage_gb=_to_int(row.usage_gb, "usage_gb", tally),
        last_activity_date=_to_date(row.last_activity_date, clock, tally),
        clv=clv,
        rfm_score=rfm,
        segment=row.segment or DEFAULT_SEGMENT,
    )


def parse_csv_report(
    text: str,
    rng: Optional[random.Random] = None,
    clock: Clock = date.today,
    backfill: Optional[RandomBackfill] = None,
) -> ImportReport:
    """
    Decode CSV text into customers plus counters of defaulted/coerced fields.
    Fewer than two non-blank lines means nothing to import: empty report.
    """
    text = (text or "").lstrip("\ufeff")  # BOM from Excel-saved files
    lines = [ln for ln in text.split("\n") if ln.strip()]
    if len(lines) < 2:
        logger.info("csv import skipped", extra={"non_blank_lines": len(lines)})
        return ImportReport()

    backfill = backfill or RandomBackfill(rng)
    tally = _Tally()
    headers = [_clean(h).lower() for h in lines[0].split(",")]

    records: List[Customer] = []
    for line in lines[1:]:
        values = [_clean(v) for v in line.split(",")]
        entry = dict(zip(headers, values))
        records.append(_to_customer(_resolve(entry), backfill, clock, tally))

    report = ImportReport(records=records, defaulted=dict(tally.defaulted), coerced=dict(tally.coerced))
    logger.info(
        "csv import decoded",
        extra={"rows": len(records), "defaulted": report.defaulted, "coerced": report.coerced},
    )
    return report


def parse_csv(
    text: str,
    rng: Optional[random.Random] = None,
    clock: Clock = date.today,
    backfill: Optional[RandomBackfill] = None,
) -> List[Customer]:
    return parse_csv_report(text, rng=rng, clock=clock, backfill=backfill).records


def load_roster(path: Optional[str] = None, rng: Optional[random.Random] = None) -> List[Customer]:
    path = path or settings.ROSTER_PATH
    if not os.path.exists(path):
        logger.warning("roster file not found", extra={"path": path})
        return []
    with open(path, encoding="utf-8-sig") as f:
        return parse_csv(f.read(), rng=rng)


# ---------- encode ----------
def _fmt_number(x) -> str:
    if isinstance(x, float) and x.is_integer():
        return str(int(x))
    return str(x)


def serialize_csv(records: Sequence[Customer]) -> str:
    """Roster -> CSV text. Only contract and segment are quoted."""
    if not records:
        return ""
    rows = [",".join(EXPORT_HEADERS)]
    for c in records:
        rows.append(",".join([
            c.id,
            _fmt_number(c.tenure),
            _fmt_number(c.monthly_charges),
            _fmt_number(c.total_charges),
            f'"{c.contract}"',
            _fmt_number(c.usage_gb),
            c.last_activity_date.isoformat(),
            _fmt_number(c.clv),
            f'"{c.segment}"',
            "Yes" if c.churn else "No",
        ]))
    return "\n".join(rows)


def export_filename(clock: Clock = date.today, prefix: Optional[str] = None) -> str:
    return f"{prefix or settings.EXPORT_PREFIX}_{clock().isoformat()}.csv"


def export_csv(
    records: Iterable[Customer],
    directory: Optional[str] = None,
    clock: Clock = date.today,
) -> Optional[str]:
    """Write the export file and return its path; no file for an empty roster."""
    records = list(records)
    if not records:
        return None
    directory = directory or settings.EXPORT_DIR
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, export_filename(clock))
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(serialize_csv(records))
    logger.info("csv export written", extra={"path": path, "rows": len(records)})
    return path
