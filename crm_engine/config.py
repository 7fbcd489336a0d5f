"""
Runtime configuration, read from environment variables.
"""

import os
from decimal import Decimal

from .parsing import parse_percent

# Environment (dev, staging, prod)
ENVIRONMENT = os.environ.get("ENVIRONMENT", "dev")

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///crm_data.sqlite3")

PORT = int(os.environ.get("PORT", 8080))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# Rate used by the commission panel; operators can override it per request
DEFAULT_COMMISSION_RATE = parse_percent(os.environ.get("DEFAULT_COMMISSION_RATE"), Decimal("5"))

# Fixed rate behind the dashboard's "comissão gerada"; kept separate from the panel rate
KPI_COMMISSION_RATE = parse_percent(os.environ.get("KPI_COMMISSION_RATE"), Decimal("5"))

# User stamped into proposals when the request carries no X-User-Id header
DEFAULT_USER_ID = os.environ.get("DEFAULT_USER_ID", "anonymous")
