"""
Caller identity from a Bearer JWT. Tokens are issued by the account service; here we
only verify the signature and read the account id (userId claim, falling back to sub).
"""
import logging

import jwt
from fastapi import Header, HTTPException

from footfall.config import settings

logger = logging.getLogger(__name__)

STATUS_UNAUTHORIZED = 401


def decode_account_id(token: str) -> str:
    """Return the account id in token. Raises jwt.InvalidTokenError when invalid."""
    claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    account_id = claims.get("userId") or claims.get("sub")
    if not account_id:
        raise jwt.InvalidTokenError("token has no userId or sub claim")
    return str(account_id)


def get_current_account(authorization: str | None = Header(None)) -> str:
    """FastAPI dependency: the authenticated account id for this request."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=STATUS_UNAUTHORIZED, detail="Access denied. No token provided.")
    token = authorization[len("Bearer "):].strip()
    try:
        return decode_account_id(token)
    except jwt.InvalidTokenError as e:
        logger.debug("Rejected bearer token: %s", e)
        raise HTTPException(status_code=STATUS_UNAUTHORIZED, detail="Invalid token. Authentication failed.")
