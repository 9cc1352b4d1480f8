# scripts/generate_demo_data.py
# Generates a synthetic telecom customer roster for the dashboard demo.
# Output: data/customers.csv (same column layout as the dashboard export)

import os
from datetime import date, timedelta

import numpy as np
import pandas as pd

np.random.seed(42)

OUT_DIR = "data"
os.makedirs(OUT_DIR, exist_ok=True)

# --------------------------
# Config (tweak freely)
# --------------------------
N_CUSTOMERS   = 500
MAX_TENURE    = 72          # months
ACTIVITY_DAYS = 180         # last activity within this window
TODAY         = date.today()

CONTRACTS = ["Month-to-month", "One year", "Two year"]

# --------------------------
# 1) Base attributes
# --------------------------
tenure = np.random.randint(1, MAX_TENURE + 1, size=N_CUSTOMERS)
monthly = np.round(np.random.rand(N_CUSTOMERS) * 100 + 20, 2)
total = np.round(tenure * monthly, 2)
contract = np.random.choice(CONTRACTS, size=N_CUSTOMERS)
usage = np.random.randint(10, 510, size=N_CUSTOMERS)
days_ago = np.random.randint(0, ACTIVITY_DAYS, size=N_CUSTOMERS)

# --------------------------
# 2) Churn: pricier + month-to-month churns more
# --------------------------
churn_p = (monthly / 120) * np.where(contract == "Month-to-month", 0.7, 0.2)
churn = np.random.rand(N_CUSTOMERS) < churn_p

# --------------------------
# 3) Segment rules (first match wins)
# --------------------------
def segment(t, tot, m, ch, ago):
    if t > 48 and tot > 5000:
        return "Champions"
    if ch and t < 12:
        return "Lost Customers"
    if m > 90:
        return "Big Spenders"
    if ago > 90:
        return "At Risk"
    return "Loyal Customers"

segments = [segment(*args) for args in zip(tenure, total, monthly, churn, days_ago)]

df = pd.DataFrame({
    "Customer ID": [f"CUST-{1000 + i}" for i in range(N_CUSTOMERS)],
    "Tenure (Months)": tenure,
    "Monthly Charges": monthly,
    "Total Charges": total,
    "Contract Type": contract,
    "Usage (GB)": usage,
    "Last Activity": [(TODAY - timedelta(days=int(d))).isoformat() for d in days_ago],
    "CLV": np.round(total * 0.4, 2),
    "RFM Score": np.random.randint(1, 6, size=N_CUSTOMERS),
    "Segment": segments,
    "Churned": np.where(churn, "Yes", "No"),
})

df.to_csv(os.path.join(OUT_DIR, "customers.csv"), index=False)
print(f"✅ Wrote {len(df):,} customers to data/customers.csv ({int(churn.sum())} churned)")
