from typing import Optional
from datetime import datetime, timezone
from hrms.core.security import verify_token

def decode_access_token(token: Optional[str]) -> Optional[dict]:
    """Decode and validate access token, None on any failure"""
    if not token:
        return None
    try:
        payload = verify_token(token)
        if payload is None:
            return None

        # Check token type
        if payload.get("type") != "access":
            return None

        # Check expiration
        exp = payload.get("exp")
        if exp is None or datetime.now(timezone.utc).timestamp() > exp:
            return None

        # Subject must be a user id
        if payload.get("sub") is None:
            return None
        int(payload["sub"])

        return payload
    except (TypeError, ValueError):
        return None
