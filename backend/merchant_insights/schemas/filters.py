"""Request-side schemas: the active filter set and the analytics query body."""

from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FilterValue(BaseModel):
    """A single ``{providerId, filterId, value}`` entry of the query."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    provider_id: Optional[str] = Field(default=None, alias="providerId")
    filter_id: str = Field(alias="filterId")
    value: str


class AnalyticsFilters(BaseModel):
    """The filter set the sidebar applies to every request of a tab.

    Accepts both the API's camelCase keys and snake_case names.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")
    provider_id: Optional[str] = Field(default=None, alias="providerId")
    merchant_id: str = Field(default="", alias="merchantId")
    user_id: Optional[str] = Field(default=None, alias="userID")
    filter_values: List[FilterValue] = Field(default_factory=list, alias="filterValues")

    @model_validator(mode="after")
    def _check_range(self) -> "AnalyticsFilters":
        if self.end_date < self.start_date:
            raise ValueError(
                f"end_date {self.end_date} is before start_date {self.start_date}"
            )
        return self


class AnalyticsRequestHeader(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="ID")
    application: str


class AnalyticsRequestPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userID")
    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")
    provider_id: str = Field(alias="providerId")
    metric_ids: List[str] = Field(alias="metricIDs")
    filter_values: List[FilterValue] = Field(default_factory=list, alias="filterValues")
    metric_parameters: Dict[str, Any] = Field(default_factory=dict, alias="metricParameters")
    merchant_id: str = Field(alias="merchantId")


class AnalyticsRequest(BaseModel):
    header: AnalyticsRequestHeader
    payload: AnalyticsRequestPayload

    def to_wire(self) -> Dict[str, Any]:
        """JSON-ready body with the API's field names."""
        return self.model_dump(mode="json", by_alias=True)
