import uuid
from datetime import datetime, timezone
from typing import Any
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.constants import DATETIME_FORMAT
from utils.money_helper import as_finite_number, round_cents


def make_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4()}"


def now_iso() -> str:
    return datetime.now(timezone.utc).strftime(DATETIME_FORMAT)


def non_negative_cents(v: Any, fallback: int = 0) -> int:
    """非法值回退为 fallback，负数截断为 0"""
    n = as_finite_number(v, None)
    if n is None:
        return fallback
    return max(0, round_cents(n))


class BaseSchema(BaseModel):
    """
    基础模型，配置了 Pydantic V2 的通用设置
    同时接受 snake_case 与 camelCase 字段名
    """
    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,  # 相当于 V1 的 orm_mode=True
        extra='ignore',        # 忽略多余字段
        alias_generator=to_camel,
    )


class RecordModel(BaseSchema):
    """
    记录模型基类，包含 id 与时间戳
    """
    id: str = Field(..., description="唯一标识符")
    created_at: str = Field(default_factory=now_iso, description="创建时间 (ISO 8601)")
    updated_at: str = Field(default_factory=now_iso, description="更新时间 (ISO 8601)")
