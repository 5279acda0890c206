from enum import Enum

class ComponentType(str, Enum):
    MATERIAL = "material"
    BOM_ITEM = "bom_item"

class BomItemType(str, Enum):
    PART = "part"
    PRODUCT = "product"

class OverheadKind(str, Enum):
    FLAT = "flat"
    PERCENT = "percent"

class RoundingMode(str, Enum):
    NEAREST = "nearest"
    UP = "up"
    DOWN = "down"

class CurrencyDisplay(str, Enum):
    SYMBOL = "symbol"
    CODE = "code"

class CostWarning(str, Enum):
    CIRCULAR_REFERENCE = "Circular reference detected"
    INCOMPLETE_LINKS = "Incomplete component links"
