import pytest
from core.demo_data import create_demo_sheet
from schemas.costing import CostSheet, FlatOverhead, PercentOverhead
from services.costing_service import CostingService


def test_demo_sheet_totals():
    """测试演示成本表"""
    totals = CostingService.compute_totals(create_demo_sheet())

    # 6.2 x 625 + 1 x 399 + 10 x 28
    assert totals.materials_subtotal_cents == 4554
    # 4554 x 1.06 = 4827.24
    assert totals.materials_with_waste_cents == 4827
    assert totals.labor_subtotal_cents == 5500
    assert totals.overhead_flat_cents == 600
    # 12% of 10327
    assert totals.overhead_percent_cents == 1239
    assert totals.overhead_total_cents == 1839
    assert totals.batch_total_cents == 12166
    assert totals.cost_per_unit_cents == 1217
    assert totals.price_per_unit_cents == 1886
    assert totals.profit_per_unit_cents == 669
    assert totals.margin_pct == 35.5
    assert totals.price_per_unit_with_tax_cents == 1886


def test_zero_batch_size_has_no_per_unit_figures():
    """批量为 0 时单位指标为空"""
    totals = CostingService.compute_totals({
        "batch_size": 0,
        "materials": [{"qty": 2, "unit_cost_cents": 150}],
    })

    assert totals.batch_total_cents == 300
    assert totals.cost_per_unit_cents is None
    assert totals.price_per_unit_cents is None
    assert totals.profit_per_unit_cents is None
    assert totals.margin_pct is None
    assert totals.price_per_unit_with_tax_cents is None


def test_tax_and_markup():
    """加价与税率"""
    sheet = CostSheet(
        batch_size=1,
        markup_pct=100,
        tax_pct=8.25,
        materials=[{"qty": 1, "unit_cost_cents": 1000}],
    )

    totals = CostingService.compute_totals(sheet)

    assert totals.cost_per_unit_cents == 1000
    assert totals.price_per_unit_cents == 2000
    assert totals.margin_pct == 50.0
    assert totals.price_per_unit_with_tax_cents == 2165


def test_zero_price_has_no_margin():
    """售价为 0 时毛利率为空"""
    totals = CostingService.compute_totals(CostSheet(batch_size=1))

    assert totals.price_per_unit_cents == 0
    assert totals.margin_pct is None


@pytest.mark.parametrize("field,value", [("waste_pct", 5000), ("tax_pct", -10)])
def test_percentages_are_clamped(field, value):
    """百分比截断到合法范围"""
    sheet = CostSheet(batch_size=1, markup_pct=0, materials=[{"qty": 1, "unit_cost_cents": 100}], **{field: value})

    totals = CostingService.compute_totals(sheet)

    if field == "waste_pct":
        # capped at 1000% -> x11
        assert totals.materials_with_waste_cents == 1100
    else:
        assert totals.price_per_unit_with_tax_cents == totals.price_per_unit_cents


def test_overhead_rows_by_kind():
    """管理费按 kind 拆分，未知 kind 丢弃"""
    sheet = CostSheet.model_validate({
        "overhead": [
            {"name": "Rent", "kind": "flat", "amountCents": 250},
            {"name": "Admin", "kind": "percent", "percent": 10},
            {"name": "???", "kind": "mystery"},
        ],
        "labor": [{"hours": 1, "rateCents": 1000}],
    })

    assert [type(o) for o in sheet.overhead] == [FlatOverhead, PercentOverhead]

    totals = CostingService.compute_totals(sheet)
    assert totals.overhead_flat_cents == 250
    assert totals.overhead_percent_cents == 100
    assert totals.batch_total_cents == 1350


def test_non_finite_inputs_are_zeroed():
    """非有限数值按 0 处理"""
    sheet = CostSheet.model_validate({
        "batchSize": "abc",
        "materials": [{"qty": float("nan"), "unitCostCents": 100}],
        "labor": [{"hours": float("inf"), "rateCents": 100}],
    })

    totals = CostingService.compute_totals(sheet)

    assert totals.batch_total_cents == 0
    assert totals.cost_per_unit_cents is None
