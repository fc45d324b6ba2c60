"""
ROUTERS - FastAPI Router Modules

Usage:
    from routers import scoring_router

    app.include_router(scoring_router)
"""

from .scoring import router as scoring_router

__all__ = [
    'scoring_router',
]
