# nexatel/analytics.py
import calendar
import math
import random
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, List, Optional, Sequence

import pandas as pd

from nexatel.schemas import SEGMENTS, ClvBucket, Customer, DashboardStats, SegmentSummary, TrendPoint

CLV_BINS = [0, 500, 1000, 2000, 3000, math.inf]
CLV_LABELS = ["$0-500", "$500-1k", "$1k-2k", "$2k-3k", "$3k+"]

# ---------- roster views ----------
def search_customers(records: Sequence[Customer], query: Optional[str]) -> List[Customer]:
    """Case-insensitive substring match on id or segment. Blank query keeps everything."""
    q = (query or "").strip().lower()
    if not q:
        return list(records)
    return [c for c in records if q in c.id.lower() or q in c.segment.lower()]

def to_frame(records: Sequence[Customer]) -> pd.DataFrame:
    return pd.DataFrame([c.model_dump() for c in records])

# ---------- KPIs ----------
def _fixed(x: float, places: int) -> str:
    """Fixed-point string with ties rounded up (12.25 -> "12.3")."""
    return str(Decimal(x).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))

def dashboard_stats(records: Sequence[Customer]) -> DashboardStats:
    """
    Headline numbers for the dashboard cards.
      churnRate = churned / total * 100  (1 d.p., string)
      avgClv    = mean(clv)              (2 d.p., string)
    An empty roster gives a fixed zero result.
    """
    if not records:
        return DashboardStats(total=0, churn_rate="0", avg_clv="0", active=0)
    total = len(records)
    churned = sum(1 for c in records if c.churn)
    avg_clv = sum(c.clv for c in records) / total
    return DashboardStats(
        total=total,
        churn_rate=_fixed(churned / total * 100, 1),
        avg_clv=_fixed(avg_clv, 2),
        active=total - churned,
    )

def trend_series(
    records: Sequence[Customer],
    months: int = 6,
    rng: Optional[random.Random] = None,
    clock: Callable[[], date] = date.today,
) -> List[TrendPoint]:
    """
    Synthetic active/churned series for the trend chart, oldest month first.
    Scaled from today's counts with +/-20% noise; not a historical reconstruction.
    """
    rng = rng or random.Random()
    current_month = clock().month - 1  # 0-based
    active_now = sum(1 for c in records if not c.churn)
    churned_now = len(records) - active_now

    out: List[TrendPoint] = []
    for back in range(months - 1, -1, -1):
        label = calendar.month_abbr[(current_month - back) % 12 + 1]
        active = math.floor(active_now * (1 - back * 0.02) * rng.uniform(0.8, 1.2))
        churned = math.floor(churned_now / months * rng.uniform(0.8, 1.2))
        out.append(TrendPoint(label=label, active=max(active, 0), churned=churned))
    return out

# ---------- segmentation & CLV ----------
def segment_breakdown(records: Sequence[Customer]) -> List[SegmentSummary]:
    """Count, churned and mean CLV per conventional segment (other labels are ignored)."""
    df = to_frame(records)
    if df.empty or not df["segment"].isin(SEGMENTS).any():
        return [SegmentSummary(segment=s, count=0, churned=0, avg_clv=0.0) for s in SEGMENTS]
    agg = (
        df[df["segment"].isin(SEGMENTS)]
          .groupby("segment")
          .agg(count=("id", "size"), churned=("churn", "sum"), avg_clv=("clv", "mean"))
          .reindex(list(SEGMENTS))
    )
    out = []
    for seg, r in agg.iterrows():
        count = 0 if pd.isna(r["count"]) else int(r["count"])
        out.append(SegmentSummary(
            segment=seg,
            count=count,
            churned=int(r["churned"]) if count else 0,
            avg_clv=round(float(r["avg_clv"]), 2) if count else 0.0,
        ))
    return out

def clv_distribution(records: Sequence[Customer]) -> List[ClvBucket]:
    """CLV histogram in fixed buckets, lower bound inclusive."""
    if not records:
        return [ClvBucket(range=label, count=0) for label in CLV_LABELS]
    clv = pd.Series([c.clv for c in records])
    counts = pd.cut(clv, bins=CLV_BINS, labels=CLV_LABELS, right=False).value_counts(sort=False)
    return [ClvBucket(range=label, count=int(counts[label])) for label in CLV_LABELS]

def high_value_customers(records: Sequence[Customer], threshold: float = 2500, limit: int = 6) -> List[Customer]:
    return [c for c in records if c.clv > threshold][:limit]

def top_customers_by_total(records: Sequence[Customer], limit: int = 5) -> List[Customer]:
    """Highest total charges first; ties keep roster order. Input is not reordered."""
    return sorted(records, key=lambda c: c.total_charges, reverse=True)[:limit]
