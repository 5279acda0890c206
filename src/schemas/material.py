from pydantic import Field, field_validator

from config import DEFAULT_UNIT
from .base import RecordModel, non_negative_cents

# ---------------------- Material Models ----------------------

class Material(RecordModel):
    """原料 (成本计算中只读)"""
    name: str = Field("", description="原料名称")
    code: str = Field("", description="原料编码")
    category: str = Field("", description="分类")
    unit: str = Field(DEFAULT_UNIT, description="计量单位")
    unit_cost_cents: int = Field(0, ge=0, description="单位成本 (分)")
    supplier: str = Field("", description="供应商")
    last_purchase_cost_cents: int = Field(0, ge=0, description="最近采购单价 (分)")
    last_purchase_date: str = Field("", description="最近采购日期 (YYYY-MM-DD)")
    is_active: bool = Field(True, description="是否启用，停用原料仍参与成本计算")

    @field_validator('unit_cost_cents', 'last_purchase_cost_cents', mode='before')
    @classmethod
    def normalize_cents(cls, v):
        return non_negative_cents(v)

    @field_validator('is_active', mode='before')
    @classmethod
    def normalize_active(cls, v):
        return True if v is None else bool(v)
