#!/usr/bin/env python3
"""Fetch a dashboard tab's metrics for a date range and print them as JSON.

Usage locally:
    python -m scripts.fetch_metrics revenue --start 2025-04-01 --end 2025-04-30 --user E12345
    python -m scripts.fetch_metrics dashboard --start 2025-01-01 --end 2025-06-30 \\
        --granularity monthly
    python -m scripts.fetch_metrics revenue --start 2025-04-01 --end 2025-04-30 \\
        --metrics total_revenue revenue_per_day --output april.json

Output:
    {"current_range": ..., "previous_range": ..., "errors": [...],
     "stats": {...}, "metrics": {metric_id: {"merchant": ..., "competitor": ...}},
     "definitions": {metric_id: {"unit": ..., "description": ...}},
     "buckets": {metric_id: [...]}}   # only with --granularity

The previous-year window is fetched alongside the requested one. Logs go to
stderr so stdout stays valid JSON.
"""

import argparse
import asyncio
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict

# Ensure the project root is on the path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from merchant_insights.clients.base_client import AnalyticsAPIError
from merchant_insights.config import Settings
from merchant_insights.domain.metrics import TAB_METRICS, MetricShape, get_metric_definition
from merchant_insights.domain.periods import Granularity
from merchant_insights.facade import AnalyticsFacade
from merchant_insights.logging_config import setup_logging
from merchant_insights.services.request_builder import parse_date_range

logger = logging.getLogger("fetch_metrics")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Fetch merchant analytics metrics.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("tab", choices=sorted(TAB_METRICS), help="Dashboard tab")
    parser.add_argument("--start", required=True, help="Start date (YYYY-MM-DD)")
    parser.add_argument("--end", required=True, help="End date (YYYY-MM-DD)")
    parser.add_argument("--user", default=None, help="userID (default: DEFAULT_USER_ID)")
    parser.add_argument("--merchant", default=None, help="merchantId (default: DEFAULT_MERCHANT_ID)")
    parser.add_argument(
        "--metrics",
        nargs="+",
        default=None,
        help="Override the tab's metric ids",
    )
    parser.add_argument(
        "--granularity",
        choices=[g.value for g in Granularity],
        default=None,
        help="Also bucket time-series metrics at this granularity",
    )
    parser.add_argument("--output", type=Path, default=None, help="Write JSON here instead of stdout")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace, settings: Settings) -> Dict[str, Any]:
    start, end = parse_date_range(args.start, args.end)
    filters = {
        "startDate": start,
        "endDate": end,
        "userID": args.user or settings.default_user_id or None,
        "merchantId": args.merchant or settings.default_merchant_id,
    }

    async with AnalyticsFacade(settings=settings) as facade:
        result = await facade.fetch_tab(args.tab, filters, metric_ids=args.metrics)

        out: Dict[str, Any] = {
            "current_range": result.current_range.model_dump(mode="json"),
            "previous_range": result.previous_range.model_dump(mode="json"),
            "errors": result.errors,
            "stats": facade.stats(result),
            "metrics": {mid: m.as_dict() for mid, m in result.metrics.items()},
        }
        out["definitions"] = {}
        for mid in result.metrics:
            definition = get_metric_definition(mid)
            if definition is not None:
                out["definitions"][mid] = {
                    "unit": definition.unit,
                    "description": definition.description,
                }
        if args.granularity:
            out["buckets"] = {
                mid: [b.model_dump() for b in facade.buckets(m, args.granularity, start, end)]
                for mid, m in result.metrics.items()
                if m.shape is MetricShape.TIME_SERIES
            }
    return out


def main(argv=None):
    args = parse_args(argv)
    settings = Settings()
    setup_logging(json_logs=settings.json_logs, log_level=settings.log_level, stream=sys.stderr)

    t0 = time.time()
    try:
        out = asyncio.run(run(args, settings))
    except ValueError as exc:
        logger.error("Invalid request: %s", exc)
        sys.exit(2)
    except AnalyticsAPIError as exc:
        logger.error("Data unavailable: %s", exc)
        sys.exit(1)

    text = json.dumps(out, indent=2)
    if args.output:
        args.output.write_text(text)
        logger.info("Wrote %s", args.output)
    else:
        print(text)

    logger.info("Fetched %d metrics in %.1fs", len(out["metrics"]), time.time() - t0)


if __name__ == "__main__":
    main()
