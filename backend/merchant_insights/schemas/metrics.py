"""Normalised metric schemas handed to the presentation layer."""

from datetime import date
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from merchant_insights.domain.metrics import MetricShape

# float for scalars; {YYYY-MM-DD: float} for time series; {label: float} for breakdowns
NormalizedValue = Union[float, Dict[str, float]]


class EntityValues(BaseModel):
    """Current-window value and (when available) the previous-year value."""

    model_config = ConfigDict(frozen=True)

    current: NormalizedValue
    previous: Optional[NormalizedValue] = None


class NormalizedMetric(BaseModel):
    """One metric, normalised for the merchant and optionally the competition.

    ``competitor`` is None when the metric is merchant-only or the response
    carried no competition record.
    """

    model_config = ConfigDict(frozen=True)

    metric_id: str
    shape: MetricShape
    merchant: EntityValues
    competitor: Optional[EntityValues] = None

    def as_dict(self) -> Dict[str, Any]:
        """Plain-dict view; the ``competitor`` key is omitted rather than null."""
        out: Dict[str, Any] = {"merchant": self.merchant.model_dump()}
        if self.competitor is not None:
            out["competitor"] = self.competitor.model_dump()
        return out


class NormalizationResult(BaseModel):
    metrics: Dict[str, NormalizedMetric] = Field(default_factory=dict)
    errors: List[str] = Field(default_factory=list)


class DateRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    start_date: date
    end_date: date


class MetricsResult(BaseModel):
    """Merged current + previous-year metrics for one fetch cycle.

    ``errors`` carries soft failures (e.g. previous-year data unavailable);
    the current-window metrics are always present when this object exists.
    """

    model_config = ConfigDict(frozen=True)

    metrics: Dict[str, NormalizedMetric] = Field(default_factory=dict)
    errors: List[str] = Field(default_factory=list)
    current_range: Optional[DateRange] = None
    previous_range: Optional[DateRange] = None

    def get(self, metric_id: str) -> Optional[NormalizedMetric]:
        return self.metrics.get(metric_id)


class Bucket(BaseModel):
    """One aggregated period of a time series, e.g. ``("2025-04", "Apr 2025", 1200.0)``."""

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    value: float


class ChangeResult(BaseModel):
    """Year-over-year change; ``percent_change`` is None when undefined."""

    model_config = ConfigDict(frozen=True)

    current: float
    previous: Optional[float] = None
    percent_change: Optional[float] = None


class AlignedPoint(BaseModel):
    """A current-window day paired with the same day one year earlier."""

    model_config = ConfigDict(frozen=True)

    day: str
    current: float
    previous: Optional[float] = None
