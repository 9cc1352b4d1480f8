# nexatel/scoring.py
import math
from dataclasses import dataclass

from nexatel.schemas import ChurnPrediction

# fixed logistic coefficients
B0 = 0.5
B_TENURE = -0.05
B_MONTHLY = 0.02
B_MONTH_TO_MONTH = 1.2
B_COMMITTED = -0.8


@dataclass(frozen=True)
class RiskThresholds:
    """Probability (0-100) cut-offs, strict '>' comparison."""
    high: int = 70
    medium: int = 40


def churn_logit(tenure: float, monthly_charges: float, contract_type: str) -> float:
    b3 = B_MONTH_TO_MONTH if contract_type == "Month-to-month" else B_COMMITTED
    return B0 + B_TENURE * tenure + B_MONTHLY * monthly_charges + b3


def _sigmoid(z: float) -> float:
    if z >= 0:
        return 1 / (1 + math.exp(-z))
    e = math.exp(z)  # no overflow for very negative z
    return e / (1 + e)


def risk_level(probability: float, thresholds: RiskThresholds = RiskThresholds()) -> str:
    """
    High   : probability > high
    Medium : medium < probability <= high
    Low    : otherwise
    """
    if probability > thresholds.high:
        return "High"
    elif probability > thresholds.medium:
        return "Medium"
    return "Low"


def predict_churn(
    tenure: float,
    monthly_charges: float,
    contract_type: str,
    thresholds: RiskThresholds = RiskThresholds(),
) -> ChurnPrediction:
    """
    Churn probability from a fixed-coefficient logistic model:
      z = 0.5 - 0.05*tenure + 0.02*monthly + (1.2 if Month-to-month else -0.8)
    Inputs are trusted as-is; callers validate ranges.
    """
    z = churn_logit(tenure, monthly_charges, contract_type)
    p = _sigmoid(z)
    probability = math.floor(p * 100 + 0.5)  # round half up, display only
    # tier from the unrounded percentage: 70.06% is High though shown as 70
    return ChurnPrediction(probability=probability, risk_level=risk_level(p * 100, thresholds))
