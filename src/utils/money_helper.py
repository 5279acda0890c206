"""
金额工具模块
所有金额均以最小货币单位 (分) 的整数表示
"""

import math

from core.constants import (
    CURRENCY_SYMBOLS,
    MIN_ROUNDING_INCREMENT_CENTS,
    MAX_ROUNDING_INCREMENT_CENTS,
)
from core.enums import RoundingMode, CurrencyDisplay
from config import DEFAULT_CURRENCY


def as_finite_number(value, fallback=0.0):
    """将任意值转换为有限浮点数，失败返回 fallback"""
    if isinstance(value, bool):
        return float(value)
    try:
        n = float(value)
    except (TypeError, ValueError):
        return fallback
    return n if math.isfinite(n) else fallback


def round_half_away(value):
    """
    四舍五入到整数 (0.5 远离零方向)
    按小数部分判断: 0.49999999999999994 -> 0
    """
    magnitude = abs(value)
    whole = math.floor(magnitude)
    if magnitude - whole >= 0.5:
        whole += 1
    return int(whole) if value >= 0 else -int(whole)


def round_cents(cents):
    """金额取整；非有限值返回 0"""
    try:
        n = float(cents)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(n):
        return 0
    return round_half_away(n)


def clamp_number(n, low, high):
    """截断到 [low, high]；非有限值返回 low"""
    try:
        v = float(n)
    except (TypeError, ValueError):
        return low
    if not math.isfinite(v):
        return low
    return min(high, max(low, v))


def currency_code_from_settings(base_currency):
    """标准化货币代码，非三位字母代码时回退为默认货币"""
    normalized = base_currency.strip().upper() if isinstance(base_currency, str) else ""
    if len(normalized) == 3 and normalized.isascii() and normalized.isalpha():
        return normalized
    return DEFAULT_CURRENCY


def apply_rounding_increment(cents, increment_cents=1, mode=RoundingMode.NEAREST):
    """
    将金额舍入到 increment_cents 的整数倍
    例如: 1234 分, 步长 5, nearest -> 1235; down -> 1230; up -> 1235
    """
    value = round_cents(cents)
    step = int(clamp_number(round_cents(increment_cents), MIN_ROUNDING_INCREMENT_CENTS, MAX_ROUNDING_INCREMENT_CENTS))
    if step <= 1:
        return value

    try:
        mode = RoundingMode(mode)
    except ValueError:
        mode = RoundingMode.NEAREST
    if mode == RoundingMode.UP:
        return int(math.ceil(value / step)) * step
    if mode == RoundingMode.DOWN:
        return int(math.floor(value / step)) * step
    return round_half_away(value / step) * step


def format_cents(cents, currency=DEFAULT_CURRENCY, rounding_increment_cents=1,
                 rounding_mode=RoundingMode.NEAREST, currency_display=CurrencyDisplay.SYMBOL):
    """
    格式化金额字符串
    例如: format_cents(123456) -> "$1,234.56"; 负数 -> "-$1,234.56"
    """
    code = currency_code_from_settings(currency)
    value = apply_rounding_increment(cents, rounding_increment_cents, rounding_mode)
    sign = "-" if value < 0 else ""
    amount = f"{abs(value) / 100:,.2f}"

    symbol = CURRENCY_SYMBOLS.get(code)
    if currency_display == CurrencyDisplay.CODE or symbol is None:
        return f"{sign}{code} {amount}"
    return f"{sign}{symbol}{amount}"
