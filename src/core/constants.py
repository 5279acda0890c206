# 全局常量定义

# 日期时间格式
DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

# 系统默认值
DEFAULT_BOM_NAME = "Untitled BOM"
DEFAULT_SHEET_NAME = "Untitled"
DEFAULT_LINE_QTY = 1.0
DEFAULT_OUTPUT_QTY = 1.0

# 百分比上限
# 成本表中的损耗、管理费与税率按 0-1000% 截断，加价率按 0-10000% 截断
MAX_PERCENT = 1000.0
MAX_MARKUP_PERCENT = 10000.0

# 货币舍入步长范围 (分)
MIN_ROUNDING_INCREMENT_CENTS = 1
MAX_ROUNDING_INCREMENT_CENTS = 100

# 常见货币符号
CURRENCY_SYMBOLS = {
    "USD": "$",
    "CAD": "$",
    "AUD": "$",
    "NZD": "$",
    "MXN": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CNY": "¥",
    "INR": "₹",
    "KRW": "₩",
    "PHP": "₱",
    "CHF": "CHF",
}
