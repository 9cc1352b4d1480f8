from datetime import date
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ContractType = Literal["Month-to-month", "One year", "Two year"]
RiskLevel = Literal["Low", "Medium", "High"]

CONTRACT_TYPES: tuple = ("Month-to-month", "One year", "Two year")
DEFAULT_CONTRACT: ContractType = "Month-to-month"
DEFAULT_SEGMENT = "General"

# conventional segment labels, in display order
SEGMENTS: tuple = (
    "Champions",
    "Loyal Customers",
    "At Risk",
    "Lost Customers",
    "Big Spenders",
)


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Customer(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., examples=["CUST-1000"])
    tenure: int = Field(0, ge=0)
    monthly_charges: float = Field(0.0, ge=0)
    total_charges: float = Field(0.0, ge=0)
    churn: bool = False
    contract: ContractType = DEFAULT_CONTRACT
    usage_gb: int = Field(0, ge=0, alias="usageGB")
    last_activity_date: date
    clv: float = Field(0.0, ge=0)
    rfm_score: int = 1   # 1..5 by convention, not enforced on import
    segment: str = DEFAULT_SEGMENT


class RawCustomerRow(BaseModel):
    """One CSV data row resolved through the header synonym table, still untyped."""
    id: Optional[str] = None
    tenure: Optional[str] = None
    monthly_charges: Optional[str] = None
    total_charges: Optional[str] = None
    churn: Optional[str] = None
    contract: Optional[str] = None
    usage_gb: Optional[str] = None
    last_activity_date: Optional[str] = None
    clv: Optional[str] = None
    rfm_score: Optional[str] = None
    segment: Optional[str] = None


class ImportReport(BaseModel):
    records: List[Customer] = Field(default_factory=list)
    defaulted: Dict[str, int] = Field(default_factory=dict)
    coerced: Dict[str, int] = Field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.records


class DashboardStats(CamelModel):
    total: int
    churn_rate: str
    avg_clv: str
    active: int


class TrendPoint(CamelModel):
    label: str
    active: int
    churned: int


class SegmentSummary(CamelModel):
    segment: str
    count: int
    churned: int
    avg_clv: float


class ClvBucket(CamelModel):
    range: str
    count: int


class PredictRequest(CamelModel):
    tenure: int = Field(..., ge=0, examples=[12])
    monthly_charges: float = Field(..., ge=0, examples=[70])
    contract_type: ContractType = Field(..., examples=["Month-to-month"])


class ChurnPrediction(CamelModel):
    probability: int
    risk_level: RiskLevel
