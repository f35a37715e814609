import argparse
import json
import logging

from meterboard.client import DashboardStore, MeterboardAPI, statistics_cards
from meterboard.client.api import DEFAULT_BASE_URL


def main(argv=None):
    parser = argparse.ArgumentParser(description="Print dashboard cards for a filter combination")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL)
    parser.add_argument("--date")
    parser.add_argument("--floor", default="all")
    parser.add_argument("--granularity", default="day")
    parser.add_argument("--weekday", default="all")
    parser.add_argument("--unit-price", type=float, default=None,
                        help="override the server-configured price per kWh")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    filters = {
        "date": args.date,
        "floor": args.floor,
        "timeGranularity": args.granularity,
        "weekday": args.weekday,
    }
    with DashboardStore(MeterboardAPI(args.base_url)) as store:
        snap = store.refresh(filters)
    out = {
        "cards": statistics_cards(
            snap["data"]["summary"],
            snap["data"]["hourly"],
            snap["data"]["floor_analytics"],
            args.unit_price,
        ),
        "errors": {k: v for k, v in snap["errors"].items() if v},
    }
    print(json.dumps(out, indent=2))


if __name__ == "__main__":
    main()
