# src/quote_sync/web/signature.py

from __future__ import annotations

import hashlib
import hmac

SIGNATURE_PREFIX = "sha256="


def compute_signature(secret: str, payload: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def verify_signature(secret: str | None, signature: str | None, payload: bytes) -> bool:
    """Check an `X-Notion-Signature` header (hex HMAC-SHA256 of the raw body, optional sha256= prefix)."""
    if not secret or not signature:
        return False
    value = signature[len(SIGNATURE_PREFIX):] if signature.startswith(SIGNATURE_PREFIX) else signature
    return hmac.compare_digest(value.strip().lower(), compute_signature(secret, payload))
