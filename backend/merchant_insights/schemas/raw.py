"""Schemas for the analytics API response, exactly as it arrives on the wire.

Each metric comes back once per entity::

    {
      "metricID": "revenue_per_day",
      "percentageValue": false,
      "scalarValue": null,
      "seriesValues": [
        {"seriesID": "main", "seriesPoints": [{"value1": "120.5", "value2": "2025-03-01"}]}
      ],
      "merchantId": "competition"
    }

``value1`` carries the magnitude, ``value2`` the date or category label.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Coerced per point by the normalizers; anything unparsable there becomes 0
RawNumber = Any


class SeriesPoint(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    primary_value: RawNumber = Field(default=None, alias="value1")
    secondary_key: Any = Field(default=None, alias="value2")


class SeriesValue(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    series_id: Any = Field(default=None, alias="seriesID")
    points: List[SeriesPoint] = Field(default_factory=list, alias="seriesPoints")

    @field_validator("points", mode="before")
    @classmethod
    def _drop_non_objects(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return []
        return [point for point in value if isinstance(point, dict)]


class RawMetricRecord(BaseModel):
    """One entity's record for one metric."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    metric_id: str = Field(alias="metricID")
    is_percentage: Optional[bool] = Field(default=False, alias="percentageValue")
    scalar_value: RawNumber = Field(default=None, alias="scalarValue")
    series_values: Optional[List[SeriesValue]] = Field(default=None, alias="seriesValues")
    entity_tag: Optional[str] = Field(default="", alias="merchantId")

    @property
    def series(self) -> List[SeriesPoint]:
        """All series points across every series, in response order."""
        if not self.series_values:
            return []
        return [point for sv in self.series_values for point in sv.points]


class AnalyticsPayload(BaseModel):
    # Records are validated one by one so a single bad record cannot sink the rest
    metrics: Optional[List[Dict[str, Any]]] = None


class AnalyticsResponse(BaseModel):
    """Envelope returned by ``POST /api/ANALYTICS/QUERY``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    payload: Optional[AnalyticsPayload] = None
    exception: Optional[Any] = None
    messages: Optional[List[Any]] = None
    execution_time: Optional[float] = Field(default=None, alias="executionTime")

    @property
    def raw_metrics(self) -> List[Dict[str, Any]]:
        """Raw metric records; an absent payload means zero metrics."""
        if self.payload is None or not self.payload.metrics:
            return []
        return self.payload.metrics
