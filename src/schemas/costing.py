from typing import List, Literal, Optional, Union
from pydantic import Field, field_validator, model_validator

from config import DEFAULT_CURRENCY, DEFAULT_MARKUP_PCT, DEFAULT_TAX_PCT, DEFAULT_WASTE_PCT
from core.constants import DEFAULT_SHEET_NAME
from core.enums import OverheadKind
from utils.money_helper import as_finite_number, currency_code_from_settings
from .base import BaseSchema, RecordModel, make_id, non_negative_cents

# ---------------------- Cost Sheet Rows ----------------------

class MaterialItem(BaseSchema):
    id: str = Field(default_factory=lambda: make_id("m"))
    name: str = ""
    qty: float = 1.0
    unit: str = ""
    unit_cost_cents: int = 0

    @field_validator('qty', mode='before')
    @classmethod
    def finite_qty(cls, v):
        return as_finite_number(v, 0.0)

    @field_validator('unit_cost_cents', mode='before')
    @classmethod
    def normalize_cents(cls, v):
        return non_negative_cents(v)


class LaborItem(BaseSchema):
    id: str = Field(default_factory=lambda: make_id("l"))
    role: str = ""
    hours: float = 0.0
    rate_cents: int = 0

    @field_validator('hours', mode='before')
    @classmethod
    def finite_hours(cls, v):
        return as_finite_number(v, 0.0)

    @field_validator('rate_cents', mode='before')
    @classmethod
    def normalize_cents(cls, v):
        return non_negative_cents(v)


class FlatOverhead(BaseSchema):
    id: str = Field(default_factory=lambda: make_id("o"))
    name: str = ""
    kind: Literal["flat"] = OverheadKind.FLAT.value
    amount_cents: int = 0

    @field_validator('amount_cents', mode='before')
    @classmethod
    def normalize_cents(cls, v):
        return non_negative_cents(v)


class PercentOverhead(BaseSchema):
    id: str = Field(default_factory=lambda: make_id("o"))
    name: str = ""
    kind: Literal["percent"] = OverheadKind.PERCENT.value
    percent: float = 0.0

    @field_validator('percent', mode='before')
    @classmethod
    def finite_percent(cls, v):
        return as_finite_number(v, 0.0)


OverheadItem = Union[FlatOverhead, PercentOverhead]

# ---------------------- Cost Sheet ----------------------

class CostSheet(RecordModel):
    """单品成本表"""
    id: str = Field(default_factory=lambda: make_id("sheet"))
    name: str = DEFAULT_SHEET_NAME
    sku: str = ""
    currency: str = DEFAULT_CURRENCY

    unit_name: str = "unit"
    batch_size: float = 1.0

    waste_pct: float = DEFAULT_WASTE_PCT
    markup_pct: float = DEFAULT_MARKUP_PCT
    tax_pct: float = DEFAULT_TAX_PCT

    materials: List[MaterialItem] = []
    labor: List[LaborItem] = []
    overhead: List[OverheadItem] = []
    notes: str = ""

    @field_validator('currency', mode='before')
    @classmethod
    def normalize_currency(cls, v):
        return currency_code_from_settings(v)

    @field_validator('batch_size', 'waste_pct', 'markup_pct', 'tax_pct', mode='before')
    @classmethod
    def finite_numbers(cls, v):
        return as_finite_number(v, 0.0)

    @model_validator(mode='before')
    @classmethod
    def split_overhead_kinds(cls, data):
        """按 kind 拆分管理费行，未知 kind 的行丢弃"""
        if not isinstance(data, dict) or not isinstance(data.get("overhead"), list):
            return data
        rows = []
        for row in data["overhead"]:
            if isinstance(row, (FlatOverhead, PercentOverhead)):
                rows.append(row)
            elif isinstance(row, dict) and row.get("kind") == OverheadKind.FLAT.value:
                rows.append(FlatOverhead.model_validate(row))
            elif isinstance(row, dict) and row.get("kind") == OverheadKind.PERCENT.value:
                rows.append(PercentOverhead.model_validate(row))
        return {**data, "overhead": rows}


class SheetTotals(BaseSchema):
    """成本表汇总结果 (分)"""
    materials_subtotal_cents: int
    materials_with_waste_cents: int
    labor_subtotal_cents: int
    overhead_flat_cents: int
    overhead_percent_cents: int
    overhead_total_cents: int
    batch_total_cents: int
    cost_per_unit_cents: Optional[int] = None
    price_per_unit_cents: Optional[int] = None
    profit_per_unit_cents: Optional[int] = None
    margin_pct: Optional[float] = None
    price_per_unit_with_tax_cents: Optional[int] = None
