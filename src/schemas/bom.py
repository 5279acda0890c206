from typing import Any, List, Literal, Optional, Union
from pydantic import ConfigDict, Field, field_validator, model_validator

from config import DEFAULT_UNIT
from core.constants import DEFAULT_BOM_NAME, DEFAULT_LINE_QTY, DEFAULT_OUTPUT_QTY
from core.enums import BomItemType, ComponentType
from utils.money_helper import as_finite_number
from .base import BaseSchema, RecordModel, make_id, non_negative_cents


def _first(source: dict, *keys: str) -> Any:
    for key in keys:
        if key in source:
            return source[key]
    return None


def _clean_id(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


# ---------------------- Component References ----------------------

class MaterialComponent(BaseSchema):
    """引用原料的组件"""
    component_type: Literal["material"] = "material"
    material_id: Optional[str] = Field(None, description="原料ID，为空表示尚未关联")


class SubassemblyComponent(BaseSchema):
    """引用另一个 BOM 的组件 (子装配)"""
    component_type: Literal["bom_item"] = "bom_item"
    bom_id: Optional[str] = Field(None, description="子 BOM ID，为空表示尚未关联")


ComponentRef = Union[MaterialComponent, SubassemblyComponent]


# ---------------------- BOM Models ----------------------

class BomLine(RecordModel):
    """BOM 行项目"""
    id: str = Field(default_factory=lambda: make_id("bomline"))
    sort_order: int = Field(0, ge=0, description="排序")
    component: ComponentRef = Field(default_factory=MaterialComponent)
    component_name: str = ""
    quantity: float = Field(DEFAULT_LINE_QTY, description="每批次消耗数量")
    unit: str = DEFAULT_UNIT
    unit_cost_cents: int = Field(0, ge=0, description="缓存单价 (分)，引用无法解析时作为回退值")
    notes: str = ""

    @model_validator(mode='before')
    @classmethod
    def fold_component_reference(cls, data):
        """
        兼容扁平结构: componentType + materialId / componentBomId
        未知类型按原料处理
        """
        if not isinstance(data, dict):
            return data
        component = data.get("component")
        if isinstance(component, (MaterialComponent, SubassemblyComponent)):
            return data

        source = component if isinstance(component, dict) else data
        data = dict(data)
        component_type = _first(source, "component_type", "componentType")
        if component_type == ComponentType.BOM_ITEM.value:
            bom_id = _clean_id(_first(source, "component_bom_id", "componentBomId", "bom_id", "bomId"))
            data["component"] = SubassemblyComponent(bom_id=bom_id)
        else:
            material_id = _clean_id(_first(source, "material_id", "materialId"))
            data["component"] = MaterialComponent(material_id=material_id)
        return data

    @field_validator('sort_order', mode='before')
    @classmethod
    def normalize_sort_order(cls, v):
        return max(0, int(as_finite_number(v, 0)))

    @field_validator('quantity', mode='before')
    @classmethod
    def default_missing_quantity(cls, v):
        return DEFAULT_LINE_QTY if v is None or v == "" else v

    @field_validator('unit_cost_cents', mode='before')
    @classmethod
    def normalize_cents(cls, v):
        return non_negative_cents(v)

    @property
    def component_type(self) -> ComponentType:
        return ComponentType(self.component.component_type)

    @property
    def material_id(self) -> Optional[str]:
        return self.component.material_id if isinstance(self.component, MaterialComponent) else None

    @property
    def component_bom_id(self) -> Optional[str]:
        return self.component.bom_id if isinstance(self.component, SubassemblyComponent) else None


class BomRecord(RecordModel):
    """BOM 主记录"""
    id: str = Field(default_factory=lambda: make_id("bom"))
    name: str = DEFAULT_BOM_NAME
    code: str = ""
    item_type: BomItemType = BomItemType.PART
    output_qty: float = Field(DEFAULT_OUTPUT_QTY, description="每批次产出数量")
    output_unit: str = DEFAULT_UNIT
    is_active: bool = True
    notes: str = ""
    lines: List[BomLine] = []

    @field_validator('item_type', mode='before')
    @classmethod
    def normalize_item_type(cls, v):
        return BomItemType.PRODUCT if v == BomItemType.PRODUCT.value else BomItemType.PART

    @field_validator('output_qty', mode='before')
    @classmethod
    def default_missing_output_qty(cls, v):
        return DEFAULT_OUTPUT_QTY if v is None or v == "" else v

    @field_validator('is_active', mode='before')
    @classmethod
    def normalize_active(cls, v):
        return True if v is None else bool(v)

    @field_validator('lines', mode='before')
    @classmethod
    def drop_malformed_lines(cls, v):
        if v is None:
            return []
        if isinstance(v, list):
            return [line for line in v if isinstance(line, (dict, BomLine))]
        return v

    @model_validator(mode='after')
    def reindex_lines(self):
        """按 (sort_order, created_at) 排序后重新编号 0..n-1"""
        ordered = sorted(self.lines, key=lambda line: (line.sort_order, line.created_at))
        self.lines = [
            line if line.sort_order == index else line.model_copy(update={"sort_order": index})
            for index, line in enumerate(ordered)
        ]
        return self


# ---------------------- Cost Summary ----------------------

class BomCostSummary(BaseSchema):
    """BOM 成本汇总 (派生值，不持久化)"""
    model_config = ConfigDict(frozen=True)

    total_cost_cents: int = Field(0, ge=0, description="批次总成本 (分)")
    unit_cost_cents: Optional[int] = Field(None, description="单位成本 (分)，产出数量 <= 0 时为空")
    has_cycle: bool = Field(False, description="存在循环引用")
    unresolved: bool = Field(False, description="存在无法解析的引用")
