"""
Product Costing
Main Entry Point
Prints the BOM cost roll-up and cost sheet totals for the demo catalog.
"""

import argparse
import logging
import sys
from pathlib import Path

import pandas as pd

# Add src to path
root_dir = Path(__file__).parent.absolute()
sys.path.append(str(root_dir / "src"))

from config import APP_NAME, VERSION, DEFAULT_CURRENCY, DEFAULT_ROUNDING_INCREMENT_CENTS, DEFAULT_ROUNDING_MODE
from core.demo_data import create_demo_boms, create_demo_materials, create_demo_sheet
from core.enums import RoundingMode
from schemas.settings import CurrencySettings
from services.bom_service import BOMService
from services.costing_service import CostingService
from utils.logger import setup_logger
from utils.money_helper import format_cents

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=f"{APP_NAME} {VERSION}")
    parser.add_argument("--currency", default=DEFAULT_CURRENCY, help="ISO currency code used for display")
    parser.add_argument("--increment", type=int, default=DEFAULT_ROUNDING_INCREMENT_CENTS,
                        help="display rounding increment in cents (1-100)")
    parser.add_argument("--mode", default=DEFAULT_ROUNDING_MODE, choices=[m.value for m in RoundingMode],
                        help="display rounding mode")
    parser.add_argument("--verbose", action="store_true", help="enable debug logging")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    # Configure the root logger so module loggers propagate to it
    setup_logger(None, level=logging.DEBUG if args.verbose else logging.INFO)

    settings = CurrencySettings(
        base_currency=args.currency,
        currency_rounding_increment=args.increment,
        currency_rounding_mode=args.mode,
    )

    def money(cents):
        if cents is None:
            return "n/a"
        return format_cents(cents, settings.base_currency, settings.currency_rounding_increment,
                            settings.currency_rounding_mode, settings.currency_display)

    try:
        materials = create_demo_materials()
        bom_service = BOMService(materials, create_demo_boms(materials))
        report = bom_service.build_cost_report()
        report["total"] = report["total_cost_cents"].map(money)
        report["unit"] = report["unit_cost_cents"].map(lambda v: money(None if pd.isna(v) else int(v)))
        print(report[["code", "name", "output_qty", "output_unit", "total", "unit", "warning"]].to_string(index=False))

        sheet = create_demo_sheet()
        totals = CostingService.compute_totals(sheet)
        print()
        print(f"{sheet.name}: batch {money(totals.batch_total_cents)}, "
              f"cost/unit {money(totals.cost_per_unit_cents)}, "
              f"price/unit {money(totals.price_per_unit_cents)}, "
              f"margin {totals.margin_pct}%")
    except Exception as e:
        logger.error(f"Error building demo report: {e}", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
