# scripts/export_roster.py
# Writes the dashboard export for the current roster and a scored copy with churn risk.
import pandas as pd

from nexatel.analytics import search_customers, to_frame
from nexatel.dataio import export_csv, load_roster
from nexatel.scoring import predict_churn

QUERY = None  # e.g., "At Risk" to export one segment

rows = search_customers(load_roster(), QUERY)

path = export_csv(rows)
if path is None:
    print("Nothing to export: roster is empty")
    raise SystemExit(0)
print("✅ Wrote", path, "with", len(rows), "rows")

scored = to_frame(rows)
preds = [predict_churn(c.tenure, c.monthly_charges, c.contract) for c in rows]
scored["churn_probability"] = [p.probability for p in preds]
scored["risk_level"] = [p.risk_level for p in preds]

out = scored.sort_values("churn_probability", ascending=False)
out.to_csv("data/roster_risk_export.csv", index=False)
print("✅ Wrote data/roster_risk_export.csv;", pd.Series(scored["risk_level"]).value_counts().to_dict())
