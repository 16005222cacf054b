"""
Configuration module for the PlutusScan service.

All settings come from environment variables with development defaults.
"""

import os
from typing import Dict

from plutusscan.metadata import DEFAULT_CHUNK_SIZE
from plutusscan.resolver import MAX_RESOLUTION_PASSES

# ============================================================
# Environment Configuration
# ============================================================

ENV = os.getenv("PLUTUSSCAN_ENV", "dev")  # dev|stage|prod

# Logging
LOG_LEVEL = os.getenv("PLUTUSSCAN_LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("PLUTUSSCAN_LOG_JSON", "true").lower() in ("1", "true", "yes")

# Parameterization primitive, "package.module:function"
PARAMETERIZER = os.getenv("PLUTUSSCAN_PARAMETERIZER", "")

# Resolution
MAX_PASSES = int(os.getenv("PLUTUSSCAN_MAX_PASSES", str(MAX_RESOLUTION_PASSES)))
CHUNK_SIZE = int(os.getenv("PLUTUSSCAN_CHUNK_SIZE", str(DEFAULT_CHUNK_SIZE)))

# Rate limits (requests per minute)
RESOLVE_RPM = int(os.getenv("RESOLVE_RPM", "60"))

# Network (display only, the service never submits transactions)
CARDANO_NETWORK = os.getenv("CARDANO_NETWORK", "mainnet")  # mainnet|preprod|preview
EXPLORER_URL = os.getenv("EXPLORER_URL", "https://cardanoscan.io")


# ============================================================
# Validation
# ============================================================

def validate_config() -> Dict[str, bool]:
    """
    Check configuration values.
    Returns dict of setting -> valid.
    """
    return {
        "network": CARDANO_NETWORK in ("mainnet", "preprod", "preview"),
        "max_passes": MAX_PASSES >= 1,
        "chunk_size": CHUNK_SIZE > 0 and CHUNK_SIZE % 2 == 0,
        "parameterizer": bool(PARAMETERIZER) and ":" in PARAMETERIZER,
    }


# ============================================================
# Feature Flags
# ============================================================

def is_production() -> bool:
    """Check if running in production mode."""
    return ENV == "prod"


def is_debug() -> bool:
    """Check if debug mode is enabled."""
    return os.getenv("PLUTUSSCAN_DEBUG", "").lower() in ("1", "true", "yes")
