"""
Auction Market Data Service

Adaptive search-query resolution and market-data fusion for catalogers:
- Rule-based (optionally oracle-assisted) term classification
- Per-item query state with core-term protection
- Progressive relaxation against the marketplace search
- Historical + live summaries fused into confidence and insights
"""

import logging

import uvicorn

from config import (
    ANTHROPIC_API_KEY,
    CACHE,
    DEBUG,
    HOST,
    MARKETPLACE,
    ORACLE_ENABLED,
    PORT,
    QUERY_FULL_CONTROL_DEFAULT,
)
from pipeline.orchestrator import AnalysisOrchestrator
from services.app_factory import create_app
from services.app_state import AppState
from services.clients import create_anthropic_client, create_http_client
from services.marketplace import configure_marketplace
from services.oracle import ClassificationOracle
from smart_cache import SnapshotCache

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(message)s',
    datefmt='%H:%M:%S'
)
logger = logging.getLogger(__name__)


def build_app():
    http_client = create_http_client(timeout=MARKETPLACE.timeout)
    configure_marketplace(http_client=http_client)

    oracle = None
    if ORACLE_ENABLED:
        oracle = ClassificationOracle(client=create_anthropic_client(ANTHROPIC_API_KEY, required=True))

    orchestrator = AnalysisOrchestrator(oracle=oracle, cache=SnapshotCache())
    state = AppState(
        orchestrator=orchestrator,
        debug_mode=DEBUG,
        full_control_default=QUERY_FULL_CONTROL_DEFAULT,
    )
    return create_app(state, http_client=http_client, cache_cleanup_interval=CACHE.cleanup_interval)


app = build_app()


# ============================================================
# RUN SERVER
# ============================================================
if __name__ == "__main__":
    print("\n" + "=" * 60)
    print("Auction Market Data Service")
    print("=" * 60)
    print(f"API: http://{HOST}:{PORT}/docs")
    print(f"Oracle: {'enabled' if ORACLE_ENABLED else 'rule-based only'}")
    print("=" * 60 + "\n")

    uvicorn.run(
        "main:app",
        host=HOST,
        port=PORT,
        reload=False,
        workers=1
    )
