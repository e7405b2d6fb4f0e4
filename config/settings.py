"""
Centralized Configuration Settings for the Auction Market Proxy

All configuration values are consolidated here for easy management.
Tunables are grouped into dataclasses and instantiated once at import time.
"""

import os
from pathlib import Path
from dataclasses import dataclass

# ============================================================
# ENVIRONMENT LOADING
# ============================================================
from dotenv import load_dotenv

# Try .env in package dir first, then one level up
env_path = Path(__file__).parent.parent / ".env"
if not env_path.exists():
    env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)
    print(f"[CONFIG] Loaded .env from {env_path}")
else:
    print(f"[CONFIG] No .env file found at {env_path}")

# ============================================================
# SERVER SETTINGS
# ============================================================
HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "8000"))
DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# ============================================================
# CLASSIFICATION ORACLE
# ============================================================
ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
MODEL_ORACLE = os.getenv("MODEL_ORACLE", "claude-3-5-haiku-20241022")
ORACLE_ENABLED = os.getenv("ORACLE_ENABLED", "false").lower() == "true"
ORACLE_MAX_TOKENS = 600

if ANTHROPIC_API_KEY == "YOUR_API_KEY_HERE":
    ANTHROPIC_API_KEY = None

if ORACLE_ENABLED:
    # Startup fails with MissingAPIKeyError when no key is set
    print(f"[CONFIG] Classification oracle ENABLED ({MODEL_ORACLE})")
else:
    print("[CONFIG] Classification oracle DISABLED - rule-based classification only")

# ============================================================
# QUERY STATE
# ============================================================
# Whether a new session starts in user-full-control mode, where core
# terms (brand, primary object type) may be deselected.
QUERY_FULL_CONTROL_DEFAULT = os.getenv("QUERY_FULL_CONTROL_DEFAULT", "false").lower() == "true"

# ============================================================
# MARKETPLACE SEARCH
# ============================================================
@dataclass
class MarketplaceConfig:
    """Marketplace items endpoint and request limits"""
    base_url: str = os.getenv("MARKETPLACE_API_URL", "https://auctionet.com/api/v2/items.json")
    search_page_url: str = os.getenv("MARKETPLACE_SEARCH_URL", "https://auctionet.com/sv/search")
    currency: str = os.getenv("MARKETPLACE_CURRENCY", "SEK")
    per_page: int = int(os.getenv("MARKETPLACE_PER_PAGE", "200"))
    timeout: float = float(os.getenv("MARKETPLACE_TIMEOUT", "10.0"))
    user_agent: str = "auction-market-proxy/1.0"

MARKETPLACE = MarketplaceConfig()

# ============================================================
# BACKOFF LADDER
# ============================================================
@dataclass
class ResolverConfig:
    """Progressive relaxation limits"""
    max_attempts: int = 4          # Initial query counts as the first attempt
    emergency_max_terms: int = 3   # Unquoted emergency query keeps at most this many terms
    emergency_enabled: bool = True

RESOLVER = ResolverConfig()

# ============================================================
# INSIGHT THRESHOLDS
# ============================================================
@dataclass
class InsightConfig:
    """Fusion engine thresholds (percentages unless noted)"""
    min_live_sample: int = 4           # Sample-size gate for strength/weakness claims
    strong_reserve_pct: float = 70.0
    weak_reserve_pct: float = 30.0
    price_diff_min: float = 15.0       # Below this no price insight is emitted
    price_diff_notable: float = 30.0
    price_diff_large: float = 50.0
    price_diff_extreme: float = 100.0
    stable_history_confidence: float = 0.7
    stable_history_sample: int = 10
    min_history_sample: int = 3

INSIGHTS = InsightConfig()

# ============================================================
# CACHE SETTINGS
# ============================================================
DEV_MODE = os.getenv("DEV_MODE", "false").lower() == "true"

@dataclass
class CacheConfig:
    """Snapshot cache keyed by canonical query"""
    ttl_snapshot: int = 60 if DEV_MODE else 3600  # 1 min dev, 1 hour prod
    max_size: int = 200
    cleanup_interval: int = 60    # Seconds between expired-entry sweeps

CACHE = CacheConfig()

if DEV_MODE:
    print("[CONFIG] DEV_MODE enabled - using short snapshot cache TTL")
