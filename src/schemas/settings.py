from pydantic import Field, field_validator

from config import DEFAULT_CURRENCY, DEFAULT_ROUNDING_INCREMENT_CENTS, DEFAULT_ROUNDING_MODE
from core.constants import MIN_ROUNDING_INCREMENT_CENTS, MAX_ROUNDING_INCREMENT_CENTS
from core.enums import CurrencyDisplay, RoundingMode
from utils.money_helper import as_finite_number, clamp_number, currency_code_from_settings, round_cents
from .base import BaseSchema


class CurrencySettings(BaseSchema):
    """货币显示设置"""
    base_currency: str = Field(DEFAULT_CURRENCY, description="三位货币代码")
    currency_display: CurrencyDisplay = CurrencyDisplay.SYMBOL
    currency_rounding_increment: int = Field(DEFAULT_ROUNDING_INCREMENT_CENTS, description="舍入步长 (分)")
    currency_rounding_mode: RoundingMode = RoundingMode(DEFAULT_ROUNDING_MODE)

    @field_validator('base_currency', mode='before')
    @classmethod
    def normalize_currency(cls, v):
        return currency_code_from_settings(v)

    @field_validator('currency_display', mode='before')
    @classmethod
    def normalize_display(cls, v):
        return CurrencyDisplay.CODE if v == CurrencyDisplay.CODE.value else CurrencyDisplay.SYMBOL

    @field_validator('currency_rounding_increment', mode='before')
    @classmethod
    def clamp_increment(cls, v):
        n = as_finite_number(v, None)
        if n is None:
            return DEFAULT_ROUNDING_INCREMENT_CENTS
        return int(clamp_number(round_cents(n), MIN_ROUNDING_INCREMENT_CENTS, MAX_ROUNDING_INCREMENT_CENTS))

    @field_validator('currency_rounding_mode', mode='before')
    @classmethod
    def normalize_mode(cls, v):
        if v in (RoundingMode.UP.value, RoundingMode.DOWN.value):
            return RoundingMode(v)
        return RoundingMode.NEAREST
