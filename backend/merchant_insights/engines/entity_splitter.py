"""Partition one metric's raw records into merchant and competition entities."""

from dataclasses import dataclass
from typing import Iterable, Optional

from merchant_insights.schemas.raw import RawMetricRecord

# Entity tag the API uses for the aggregate competition baseline (case-sensitive).
COMPETITION_TAG = "competition"


@dataclass(frozen=True)
class EntitySplit:
    merchant: Optional[RawMetricRecord] = None
    competitor: Optional[RawMetricRecord] = None


def is_competition(entity_tag: Optional[str]) -> bool:
    return entity_tag == COMPETITION_TAG


def split(records: Iterable[RawMetricRecord], metric_id: str) -> EntitySplit:
    """Pick the merchant and competitor record for *metric_id*.

    Records for other metrics are ignored. Any tag other than
    ``"competition"`` is the merchant. If an entity appears more than once
    the last record wins.
    """
    merchant: Optional[RawMetricRecord] = None
    competitor: Optional[RawMetricRecord] = None
    for record in records:
        if record.metric_id != metric_id:
            continue
        if is_competition(record.entity_tag):
            competitor = record
        else:
            merchant = record
    return EntitySplit(merchant=merchant, competitor=competitor)
