# 演示数据
# 固定时间戳，保证每次生成的数据完全一致

from typing import List, Optional

from core.enums import BomItemType, ComponentType
from schemas.bom import BomRecord
from schemas.costing import CostSheet
from schemas.material import Material

DEMO_TIMESTAMP = "2026-02-09T00:00:00.000Z"
DEMO_BOM_TIMESTAMP = "2026-02-10T00:00:00.000Z"


def create_demo_materials() -> List[Material]:
    return [
        Material(
            id="material_demo_canvas",
            name="Canvas fabric",
            code="CANVAS-10OZ",
            category="Fabric",
            unit="yd",
            unit_cost_cents=625,
            supplier="Metro Textile",
            last_purchase_cost_cents=599,
            last_purchase_date="2026-02-05",
            created_at=DEMO_TIMESTAMP,
            updated_at=DEMO_TIMESTAMP,
        ),
        Material(
            id="material_demo_thread",
            name="Thread",
            code="THREAD-BLK",
            category="Accessories",
            unit="spool",
            unit_cost_cents=399,
            supplier="Sewing Hub",
            last_purchase_cost_cents=389,
            last_purchase_date="2026-02-03",
            created_at=DEMO_TIMESTAMP,
            updated_at=DEMO_TIMESTAMP,
        ),
    ]


def _material_line(line_id: str, sort_order: int, material: Material, quantity: float) -> dict:
    return {
        "id": line_id,
        "sort_order": sort_order,
        "component_type": ComponentType.MATERIAL.value,
        "material_id": material.id,
        "component_name": material.name,
        "quantity": quantity,
        "unit": material.unit,
        "unit_cost_cents": material.unit_cost_cents,
        "created_at": DEMO_BOM_TIMESTAMP,
        "updated_at": DEMO_BOM_TIMESTAMP,
    }


def create_demo_boms(materials: Optional[List[Material]] = None) -> List[BomRecord]:
    """
    多级 BOM 演示: 手提袋 (产品) 引用可复用的提手组件 (部件)
    materials 不足两个时使用内置的帆布与缝线
    """
    defaults = create_demo_materials()
    materials = list(materials or [])
    canvas = materials[0] if len(materials) > 0 else defaults[0]
    thread = materials[1] if len(materials) > 1 else defaults[1]

    handle_part = BomRecord(
        id="bom_demo_handle_set",
        name="Handle Set",
        code="PART-HANDLE-SET",
        item_type=BomItemType.PART,
        output_qty=1,
        output_unit="set",
        notes="Reusable part used across multiple bags.",
        created_at=DEMO_BOM_TIMESTAMP,
        updated_at=DEMO_BOM_TIMESTAMP,
        lines=[
            _material_line("bomline_demo_handle_canvas", 0, canvas, 1.2),
            _material_line("bomline_demo_handle_thread", 1, thread, 0.2),
        ],
    )

    tote_product = BomRecord(
        id="bom_demo_tote_bag",
        name="Canvas Tote Bag (BOM)",
        code="PROD-TOTE-001",
        item_type=BomItemType.PRODUCT,
        output_qty=1,
        output_unit="bag",
        notes="Demonstrates a multi-level BOM with a reusable subassembly.",
        created_at=DEMO_BOM_TIMESTAMP,
        updated_at=DEMO_BOM_TIMESTAMP,
        lines=[
            {
                "id": "bomline_demo_tote_part",
                "sort_order": 0,
                "component_type": ComponentType.BOM_ITEM.value,
                "component_bom_id": handle_part.id,
                "component_name": handle_part.name,
                "quantity": 1,
                "unit": handle_part.output_unit,
                "unit_cost_cents": 0,
                "created_at": DEMO_BOM_TIMESTAMP,
                "updated_at": DEMO_BOM_TIMESTAMP,
            },
            _material_line("bomline_demo_tote_canvas", 1, canvas, 1.8),
        ],
    )

    return [tote_product, handle_part]


def create_demo_sheet() -> CostSheet:
    return CostSheet.model_validate({
        "id": "demo",
        "name": "Demo: Canvas Tote Bag",
        "sku": "TOTE-001",
        "currency": "USD",
        "unit_name": "bag",
        "batch_size": 10,
        "waste_pct": 6,
        "markup_pct": 55,
        "tax_pct": 0,
        "materials": [
            {"id": "m_canvas", "name": "Canvas fabric", "qty": 6.2, "unit": "yd", "unit_cost_cents": 625},
            {"id": "m_thread", "name": "Thread", "qty": 1, "unit": "spool", "unit_cost_cents": 399},
            {"id": "m_label", "name": "Woven label", "qty": 10, "unit": "ea", "unit_cost_cents": 28},
        ],
        "labor": [
            {"id": "l_cut", "role": "Cut + sew", "hours": 2.5, "rate_cents": 2200},
        ],
        "overhead": [
            {"id": "o_shop", "name": "Shop overhead", "kind": "percent", "percent": 12},
            {"id": "o_pack", "name": "Packaging", "kind": "flat", "amount_cents": 600},
        ],
        "notes": "Demo cost sheet. Create a new sheet to start costing your own products.",
        "created_at": DEMO_TIMESTAMP,
        "updated_at": DEMO_TIMESTAMP,
    })
