"""
AUTH.PY - Header key checks for the scoring API

    verify_api_key    X-API-Key     member /score, enforced only when API_AUTH_ENABLED
    verify_admin_key  X-Admin-Key   /internal/score (Zone Threat data), always enforced;
                                    no ADMIN_API_KEY configured -> every request rejected

Usage:
    @router.post("/internal/score")
    async def internal_score(auth: bool = Depends(verify_admin_key)):
        ...
"""

import hmac
import logging
from typing import Optional

from fastapi import Header, HTTPException

from env_config import Config

logger = logging.getLogger(__name__)

# Module-level so tests can monkeypatch them
API_AUTH_KEY = Config.API_AUTH_KEY or ""
API_AUTH_ENABLED = Config.API_AUTH_ENABLED and bool(API_AUTH_KEY)
ADMIN_API_KEY = Config.ADMIN_API_KEY or ""


def _require_key(provided: Optional[str], expected: str, header: str) -> bool:
    """401 when the header is missing, 403 when it does not match (or nothing is configured)."""
    if not provided:
        raise HTTPException(status_code=401, detail=f"Missing {header} header")
    if not expected or not hmac.compare_digest(provided.encode(), expected.encode()):
        logger.warning("Rejected request with invalid %s", header)
        raise HTTPException(status_code=403, detail=f"Invalid {header}")
    return True


async def verify_api_key(x_api_key: Optional[str] = Header(None, alias="X-API-Key")) -> bool:
    if not API_AUTH_ENABLED:
        return True
    return _require_key(x_api_key, API_AUTH_KEY, "X-API-Key")


async def verify_admin_key(x_admin_key: Optional[str] = Header(None, alias="X-Admin-Key")) -> bool:
    return _require_key(x_admin_key, ADMIN_API_KEY, "X-Admin-Key")
