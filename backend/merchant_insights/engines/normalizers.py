"""Shape normalizers: raw entity record -> canonical value.

Three shapes, three normalizers:

* scalar       -> ``float``
* time series  -> ``{YYYY-MM-DD: float}`` in ascending date order
* categorical  -> ``{label: float}`` in response order

Malformed numbers become ``0.0``; they are never raised and never NaN.
"""

import math
import re
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, Optional

from merchant_insights.domain import metrics as m
from merchant_insights.domain.metrics import MetricShape
from merchant_insights.logging_config import get_logger
from merchant_insights.schemas.metrics import NormalizedValue
from merchant_insights.schemas.raw import RawMetricRecord, SeriesPoint

logger = get_logger(__name__)

_NUMBER_NOISE = re.compile(r"[€$,%\s]")


# ── Parsing ──────────────────────────────────────────────────────────────


def parse_number(raw: Any) -> float:
    """Parse an API magnitude, tolerating currency symbols and separators.

    >>> parse_number("1,234.50 €")
    1234.5
    >>> parse_number("n/a")
    0.0
    >>> parse_number(None)
    0.0
    >>> parse_number({"amount": 3})
    0.0
    """
    if raw is None or isinstance(raw, bool):
        return 0.0
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        cleaned = _NUMBER_NOISE.sub("", raw)
        if not cleaned:
            return 0.0
        try:
            value = float(cleaned)
        except ValueError:
            return 0.0
    else:
        return 0.0
    return value if math.isfinite(value) else 0.0


def parse_date_key(raw: Any) -> Optional[str]:
    """Return the ``YYYY-MM-DD`` key for a series date, or None if invalid.

    Accepts ISO dates, ISO datetimes and ``MM/DD/YYYY``.

    >>> parse_date_key("2025-03-01T00:00:00")
    '2025-03-01'
    >>> parse_date_key("03/01/2025")
    '2025-03-01'
    >>> parse_date_key("2025-02-30") is None
    True
    """
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    try:
        if "/" in text:
            return datetime.strptime(text, "%m/%d/%Y").date().isoformat()
        return date.fromisoformat(text.split("T")[0].split(" ")[0]).isoformat()
    except ValueError:
        return None


# ── Scalar ───────────────────────────────────────────────────────────────


def normalize_scalar(raw: Any) -> float:
    """Scalar metric value; absent or unparsable values are 0. No rounding."""
    return parse_number(raw)


# ── Time series ──────────────────────────────────────────────────────────


def normalize_time_series(points: Iterable[SeriesPoint]) -> Dict[str, float]:
    """Map each point's date to its value, last write wins, sorted by date."""
    series: Dict[str, float] = {}
    for point in points:
        key = parse_date_key(point.secondary_key)
        if key is None:
            logger.debug("series_point_skipped", raw_date=point.secondary_key)
            continue
        series[key] = parse_number(point.primary_value)
    return dict(sorted(series.items()))


# ── Categorical ──────────────────────────────────────────────────────────

GENDER_LABELS: Dict[str, str] = {
    "m": "male",
    "f": "female",
    "male": "male",
    "female": "female",
}

AGE_LABELS: Dict[str, str] = {
    "generation_z": "18-24",
    "millennials": "25-40",
    "generation_x": "41-56",
    "baby_boomers": "57-75",
    "silent_generation": "76-96",
}

CHANNEL_LABELS: Dict[str, str] = {
    "physical": "physical",
    "store": "physical",
    "retail": "physical",
    "ecommerce": "ecommerce",
    "e-commerce": "ecommerce",
    "online": "ecommerce",
}


def _interest_label(label: str) -> str:
    if label.upper().startswith("SHOPINT"):
        return label.upper()
    if label.isdigit():
        return f"SHOPINT{label}"
    return label


def canonical_category(metric_id: str, label: str) -> str:
    """Canonicalise recognised labels; anything else (including "") is kept verbatim."""
    if metric_id == m.CONVERTED_CUSTOMERS_BY_GENDER:
        return GENDER_LABELS.get(label.lower(), label)
    if metric_id == m.CONVERTED_CUSTOMERS_BY_AGE:
        return AGE_LABELS.get(label, label)
    if metric_id == m.CONVERTED_CUSTOMERS_BY_INTEREST:
        return _interest_label(label)
    if metric_id == m.REVENUE_BY_CHANNEL:
        return CHANNEL_LABELS.get(label.lower(), label)
    return label


def normalize_categorical(
    points: Iterable[SeriesPoint], metric_id: str = ""
) -> Dict[str, float]:
    """Map each point's category label to its value (last write wins).

    Long-tail grouping into "Other" is left to the presentation layer.
    """
    categories: Dict[str, float] = {}
    for point in points:
        raw_label = "" if point.secondary_key is None else str(point.secondary_key)
        categories[canonical_category(metric_id, raw_label)] = parse_number(
            point.primary_value
        )
    return categories


# ── Dispatch ─────────────────────────────────────────────────────────────

_NORMALIZERS: Dict[MetricShape, Callable[[RawMetricRecord], NormalizedValue]] = {
    MetricShape.SCALAR: lambda r: normalize_scalar(r.scalar_value),
    MetricShape.TIME_SERIES: lambda r: normalize_time_series(r.series),
    MetricShape.CATEGORICAL: lambda r: normalize_categorical(r.series, r.metric_id),
}


def normalize_record(record: RawMetricRecord, shape: MetricShape) -> NormalizedValue:
    """Normalise one entity's record according to the metric's shape."""
    return _NORMALIZERS[shape](record)
