"""Signed-key authentication.

A signed key is ``HMAC-SHA256(secret, account_id)`` rendered as hex.  It is
recomputed on every request and never stored, so there is no token store,
no expiry and no per-token revocation: rotating ``SIGNING_SECRET``
invalidates every key issued so far.

Usage in a router::

    from function_gateway.auth import require_signed_key

    @router.get("/functions")
    async def discovery(account_id: str = Depends(require_signed_key)):
        ...

Clients send the account id as ``X-Account-Id`` (or ``?account_id=``) and
the key as ``X-Signature`` (or ``?signature=``).
"""

from __future__ import annotations

import hashlib
import hmac

import structlog
from fastapi import Request

from function_gateway.config import Settings
from function_gateway.errors import AuthError

logger = structlog.get_logger()

HEADER_ACCOUNT_ID = "x-account-id"
HEADER_SIGNATURE = "x-signature"
QUERY_ACCOUNT_ID = "account_id"
QUERY_SIGNATURE = "signature"


def sign(key: str, secret: str) -> str:
    """Return the hex HMAC-SHA256 of ``key`` under ``secret``."""
    return hmac.new(secret.encode("utf-8"), key.encode("utf-8"), hashlib.sha256).hexdigest()


def verify(key: str, signature: str, secret: str) -> bool:
    """Check ``signature`` against ``sign(key, secret)`` in constant time."""
    if not signature:
        return False
    expected = sign(key, secret)
    return hmac.compare_digest(expected.encode("ascii"), signature.strip().lower().encode("utf-8"))


def get_signed_headers(account_id: str, secret: str) -> dict[str, str]:
    """Return HTTP headers for calling the gateway as ``account_id``."""
    return {
        "X-Account-Id": account_id,
        "X-Signature": sign(account_id, secret),
    }


async def require_signed_key(request: Request) -> str:
    """FastAPI dependency that authenticates the caller.

    Returns the authenticated account id.  Raises ``AuthError`` (401) if the
    signature is missing or does not match, or if no signing secret is
    configured.
    """
    settings: Settings = request.app.state.settings
    secret = settings.signing_secret
    if not secret:
        logger.error(
            "signing_secret_missing",
            path=request.url.path,
            hint="Set SIGNING_SECRET in .env",
        )
        raise AuthError()

    account_id = (
        request.headers.get(HEADER_ACCOUNT_ID)
        or request.query_params.get(QUERY_ACCOUNT_ID)
        or settings.account_id
    )
    signature = request.headers.get(HEADER_SIGNATURE) or request.query_params.get(QUERY_SIGNATURE)

    if not account_id or not signature:
        logger.warning("signature_missing", path=request.url.path)
        raise AuthError()

    if not verify(account_id, signature, secret):
        logger.warning(
            "signature_invalid",
            path=request.url.path,
            account_id=account_id,
            remote=request.client.host if request.client else "unknown",
        )
        raise AuthError()

    return account_id
