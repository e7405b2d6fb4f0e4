# Routes package for the market data service
from .catalog import router as catalog_router

__all__ = [
    'catalog_router',
]
