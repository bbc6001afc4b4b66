"""Runtime configuration for storefront.

Values can be overridden through STOREFRONT_* environment variables.
"""

import os
from decimal import Decimal
from pathlib import Path

# Persisted records live here unless a store is given its own directory
_default_data_dir = Path(__file__).parent.parent.parent / "data"
DATA_DIR = Path(os.environ.get("STOREFRONT_DATA_DIR", _default_data_dir))

# Named persisted records
CART_RECORD = "cart-storage"
SESSION_RECORD = "user-storage"
ORDER_RECORD = "order-storage"

CATALOG_BASE_URL = os.environ.get("STOREFRONT_CATALOG_URL", "https://fakestoreapi.com")
CATALOG_TIMEOUT = float(os.environ.get("STOREFRONT_CATALOG_TIMEOUT", "10"))

# Simulated payment latency in seconds
PAYMENT_DELAY_SECONDS = float(os.environ.get("STOREFRONT_PAYMENT_DELAY", "2.0"))

LOG_LEVEL = os.environ.get("STOREFRONT_LOG_LEVEL", "INFO")

FREE_SHIPPING_THRESHOLD = Decimal("50")
SHIPPING_FEE = Decimal("9.99")
TAX_RATE = Decimal("0.08")

# Owner ID recorded on orders placed without a logged-in user
GUEST_USER_ID = "guest"
