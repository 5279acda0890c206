"""
Costing Service Module
Handles cost sheet totals: materials, labor, overhead, markup and tax.
"""

import logging
from typing import Any, Dict, Iterable, Union

from core.constants import MAX_PERCENT, MAX_MARKUP_PERCENT
from schemas.costing import CostSheet, FlatOverhead, LaborItem, MaterialItem, OverheadItem, PercentOverhead, SheetTotals
from utils.money_helper import clamp_number, round_cents, round_half_away

logger = logging.getLogger(__name__)


class CostingService:
    """Service for cost sheet calculations. All amounts are integer cents."""

    @staticmethod
    def sum_material_cents(items: Iterable[MaterialItem]) -> int:
        total = 0
        for it in items:
            total += round_half_away((it.qty or 0) * (it.unit_cost_cents or 0))
        return round_cents(total)

    @staticmethod
    def sum_labor_cents(items: Iterable[LaborItem]) -> int:
        total = 0
        for it in items:
            total += round_half_away((it.hours or 0) * (it.rate_cents or 0))
        return round_cents(total)

    @staticmethod
    def sum_overhead_flat_cents(items: Iterable[OverheadItem]) -> int:
        return round_cents(sum(it.amount_cents or 0 for it in items if isinstance(it, FlatOverhead)))

    @staticmethod
    def sum_overhead_percent_cents(items: Iterable[OverheadItem], base_cents: int) -> int:
        """百分比管理费按基数 (材料含损耗 + 人工) 计算，每行单独取整"""
        total = 0
        for it in items:
            if not isinstance(it, PercentOverhead):
                continue
            pct = clamp_number(it.percent or 0, 0, MAX_PERCENT)
            total += round_half_away(base_cents * pct / 100)
        return round_cents(total)

    @staticmethod
    def compute_totals(sheet: Union[CostSheet, Dict[str, Any]]) -> SheetTotals:
        """
        Compute batch and per-unit totals for a cost sheet.

        Per-unit figures are None when the batch size is not positive.
        """
        if isinstance(sheet, dict):
            sheet = CostSheet.model_validate(sheet)

        materials_subtotal = CostingService.sum_material_cents(sheet.materials)
        waste_pct = clamp_number(sheet.waste_pct or 0, 0, MAX_PERCENT)
        materials_with_waste = round_half_away(materials_subtotal * (1 + waste_pct / 100))

        labor_subtotal = CostingService.sum_labor_cents(sheet.labor)
        base_cents = round_cents(materials_with_waste + labor_subtotal)

        overhead_flat = CostingService.sum_overhead_flat_cents(sheet.overhead)
        overhead_percent = CostingService.sum_overhead_percent_cents(sheet.overhead, base_cents)
        overhead_total = round_cents(overhead_flat + overhead_percent)

        batch_total = round_cents(base_cents + overhead_total)

        batch_size = clamp_number(sheet.batch_size or 0, 0, float("inf"))
        cost_per_unit = round_half_away(batch_total / batch_size) if batch_size > 0 else None

        markup_pct = clamp_number(sheet.markup_pct or 0, 0, MAX_MARKUP_PERCENT)
        price_per_unit = None if cost_per_unit is None else round_half_away(cost_per_unit * (1 + markup_pct / 100))
        profit_per_unit = None if price_per_unit is None else round_cents(price_per_unit - cost_per_unit)

        margin_pct = None
        if price_per_unit and profit_per_unit is not None:
            margin_pct = round_half_away(profit_per_unit / price_per_unit * 1000) / 10

        tax_pct = clamp_number(sheet.tax_pct or 0, 0, MAX_PERCENT)
        price_with_tax = None
        if price_per_unit is not None:
            price_with_tax = round_cents(price_per_unit + round_half_away(price_per_unit * tax_pct / 100))

        logger.debug(f"Cost sheet {sheet.id}: batch total {batch_total}, cost per unit {cost_per_unit}")
        return SheetTotals(
            materials_subtotal_cents=materials_subtotal,
            materials_with_waste_cents=round_cents(materials_with_waste),
            labor_subtotal_cents=labor_subtotal,
            overhead_flat_cents=overhead_flat,
            overhead_percent_cents=overhead_percent,
            overhead_total_cents=overhead_total,
            batch_total_cents=batch_total,
            cost_per_unit_cents=cost_per_unit,
            price_per_unit_cents=price_per_unit,
            profit_per_unit_cents=profit_per_unit,
            margin_pct=margin_pct,
            price_per_unit_with_tax_cents=price_with_tax,
        )
