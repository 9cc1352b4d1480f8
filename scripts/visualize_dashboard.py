import os

import matplotlib.pyplot as plt

from nexatel.analytics import clv_distribution, dashboard_stats, segment_breakdown, trend_series
from nexatel.dataio import load_roster

OUTDIR = "data/plots"
os.makedirs(OUTDIR, exist_ok=True)

roster = load_roster()
stats = dashboard_stats(roster)

# ----- Plot 1: active vs churned trend (synthetic, 12 months) -----
trend = trend_series(roster, months=12)
labels = [p.label for p in trend]

plt.figure(figsize=(10, 5))
plt.plot(labels, [p.active for p in trend], marker="o", label="Active")
plt.plot(labels, [p.churned for p in trend], marker="o", label="Churned")
plt.title(f"Customer Trend (churn rate {stats.churn_rate}%)")
plt.xlabel("Month")
plt.ylabel("Customers")
plt.legend()
plt.tight_layout()
p1 = os.path.join(OUTDIR, "trend.png")
plt.savefig(p1, dpi=150)
plt.close()

# ----- Plot 2: CLV distribution -----
buckets = clv_distribution(roster)
plt.figure(figsize=(8, 5))
plt.bar([b.range for b in buckets], [b.count for b in buckets])
plt.title(f"CLV Distribution (avg ${stats.avg_clv})")
plt.xlabel("Customer Lifetime Value")
plt.ylabel("Customer Count")
plt.tight_layout()

# annotate bars with values
for i, b in enumerate(buckets):
    plt.text(i, b.count + 1, str(b.count), ha="center", va="bottom", fontsize=8)

p2 = os.path.join(OUTDIR, "clv_distribution.png")
plt.savefig(p2, dpi=150)
plt.close()

# ----- Plot 3: segment share -----
segs = [s for s in segment_breakdown(roster) if s.count]
if segs:
    plt.figure(figsize=(7, 7))
    plt.pie([s.count for s in segs], labels=[s.segment for s in segs], autopct="%1.0f%%")
    plt.title("Segment Share")
    plt.tight_layout()
    p3 = os.path.join(OUTDIR, "segments.png")
    plt.savefig(p3, dpi=150)
    plt.close()
else:
    p3 = None

print("Saved:")
print(" -", p1)
print(" -", p2)
if p3: print(" -", p3)
