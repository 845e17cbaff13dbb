"""Fixture loading helpers for offline tests."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

FIXTURES_DIR = Path(__file__).resolve().parent


def load_fixture(name: str) -> Any:
    """Load a JSON fixture file by name."""
    path = FIXTURES_DIR / name
    if not path.exists():
        raise FileNotFoundError(f"Fixture not found: {path}")
    return json.loads(path.read_text())


def raw_record(
    metric_id: str,
    entity: str = "MERCH-001",
    scalar: Any = None,
    points: Optional[List[Tuple[Any, Any]]] = None,
) -> Dict[str, Any]:
    """A raw metric record in wire format; *points* are ``(value1, value2)`` pairs."""
    series = None
    if points is not None:
        series = [
            {
                "seriesID": "s1",
                "seriesPoints": [{"value1": v1, "value2": v2} for v1, v2 in points],
            }
        ]
    return {
        "metricID": metric_id,
        "percentageValue": False,
        "scalarValue": scalar,
        "seriesValues": series,
        "merchantId": entity,
    }


def response_with(*records: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap raw records in the analytics response envelope."""
    return {
        "payload": {"metrics": list(records)},
        "exception": None,
        "messages": None,
        "executionTime": 100.0,
    }
