import pytest
from pydantic import ValidationError
from core.enums import BomItemType, ComponentType
from schemas.bom import BomCostSummary, BomLine, BomRecord, MaterialComponent, SubassemblyComponent
from schemas.settings import CurrencySettings


def test_flat_line_shape_folds_into_component():
    """扁平结构转换为组件引用"""
    line = BomLine.model_validate({
        "componentType": "bom_item",
        "materialId": "should-be-ignored",
        "componentBomId": "sub",
        "quantity": 2,
    })

    assert isinstance(line.component, SubassemblyComponent)
    assert line.component_type == ComponentType.BOM_ITEM
    assert line.component_bom_id == "sub"
    assert line.material_id is None


def test_unknown_component_type_is_material():
    """未知类型按原料处理，空字符串 ID 视为未关联"""
    line = BomLine.model_validate({"componentType": "widget", "materialId": ""})

    assert isinstance(line.component, MaterialComponent)
    assert line.material_id is None


def test_nested_component_shape():
    line = BomLine(component={"component_type": "material", "material_id": "M1"})

    assert line.material_id == "M1"


def test_line_cost_normalization():
    """缓存单价取整并截断为非负"""
    assert BomLine(unit_cost_cents=12.5).unit_cost_cents == 13
    assert BomLine(unit_cost_cents=-7).unit_cost_cents == 0
    assert BomLine(quantity=None).quantity == 1.0


def test_bom_lines_sorted_and_reindexed():
    """行按 sort_order 排序后重新编号"""
    bom = BomRecord.model_validate({
        "id": "b",
        "lines": [
            {"id": "third", "sortOrder": 9},
            "junk",
            {"id": "first", "sortOrder": 0},
            {"id": "second", "sortOrder": 4},
        ],
    })

    assert [line.id for line in bom.lines] == ["first", "second", "third"]
    assert [line.sort_order for line in bom.lines] == [0, 1, 2]


def test_bom_defaults():
    bom = BomRecord.model_validate({"itemType": "product", "lines": None})

    assert bom.id.startswith("bom_")
    assert bom.name == "Untitled BOM"
    assert bom.item_type == BomItemType.PRODUCT
    assert bom.output_qty == 1.0
    assert bom.lines == []
    assert BomRecord(item_type="assembly").item_type == BomItemType.PART


def test_bom_rejects_non_list_lines():
    with pytest.raises(ValidationError):
        BomRecord.model_validate({"id": "b", "lines": 5})


def test_cost_summary_is_frozen():
    summary = BomCostSummary(total_cost_cents=10, unit_cost_cents=None)

    with pytest.raises(ValidationError):
        summary.total_cost_cents = 20


def test_currency_settings_normalization():
    """货币设置标准化"""
    settings = CurrencySettings.model_validate({
        "baseCurrency": "eur",
        "currencyDisplay": "weird",
        "currencyRoundingIncrement": 500,
        "currencyRoundingMode": "sideways",
    })

    assert settings.base_currency == "EUR"
    assert settings.currency_display.value == "symbol"
    assert settings.currency_rounding_increment == 100
    assert settings.currency_rounding_mode.value == "nearest"


def test_default_unit_comes_from_config():
    """默认计量单位统一取自 config"""
    from config import DEFAULT_UNIT
    from schemas.material import Material

    assert BomLine().unit == DEFAULT_UNIT
    assert BomRecord().output_unit == DEFAULT_UNIT
    assert Material(id="m").unit == DEFAULT_UNIT == "ea"
