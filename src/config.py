import os
from pathlib import Path

# Base directory of the application (src/)
APP_DIR = Path(__file__).parent
# Root directory of the project
ROOT_DIR = APP_DIR.parent

# Application Settings
APP_NAME = "Product Costing"
VERSION = "0.4.0"
DEFAULT_UNIT = "ea" # Avoid importing from core.enums to prevent circular import

# Currency Settings
DEFAULT_CURRENCY = "USD"
DEFAULT_ROUNDING_INCREMENT_CENTS = 1
DEFAULT_ROUNDING_MODE = "nearest"

# Pricing defaults for new cost sheets
DEFAULT_MARKUP_PCT = 40.0
DEFAULT_WASTE_PCT = 0.0
DEFAULT_TAX_PCT = 0.0

# Logging
LOG_DIR = Path(os.environ.get("PRODUCT_COSTING_LOG_DIR", ROOT_DIR / "logs"))
LOG_DIR.mkdir(parents=True, exist_ok=True)
LOG_FILE = LOG_DIR / "app.log"
