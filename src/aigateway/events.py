"""HTTP event helpers.

Accepted event shapes (plain dicts from the hosting runtime):
- REST / Netlify style: {"httpMethod": "POST", "headers": {...}, "body": "..."}
- HTTP API v2: {"requestContext": {"http": {"method": "POST"}}, "headers": {...}, "body": "..."}
Either may set "isBase64Encoded": true.
"""
from __future__ import annotations

import base64
import binascii
import json
from typing import Any, Dict, Optional

CLIENT_ID_HEADERS = ("x-nf-client-connection-ip", "client-ip", "x-forwarded-for")

def headers_of(event: Dict[str, Any]) -> Dict[str, str]:
    raw = event.get("headers") or {}
    if not isinstance(raw, dict):
        return {}
    return {str(k).lower(): str(v) for k, v in raw.items() if v is not None}

def method_of(event: Dict[str, Any]) -> str:
    method = event.get("httpMethod")
    if not method:
        ctx = event.get("requestContext") or {}
        method = ((ctx.get("http") or {}) if isinstance(ctx, dict) else {}).get("method")
    return str(method or "").upper()

def client_id(headers: Dict[str, str]) -> str:
    for h in CLIENT_ID_HEADERS:
        v = (headers.get(h) or "").strip()
        if v:
            return v
    return "unknown"

def body_of(event: Dict[str, Any], max_chars: Optional[int] = None) -> str:
    """Request body as text.

    A base64 body longer than the encoded size of max_chars is returned undecoded,
    so the caller's size check rejects it without decoding.
    """
    body = event.get("body")
    if body is None:
        return ""
    if isinstance(body, (dict, list)):
        # direct invoke with an already-decoded body
        return json.dumps(body, ensure_ascii=False)
    body = str(body)
    if event.get("isBase64Encoded"):
        if max_chars is not None and len(body) > (max_chars + 2) // 3 * 4:
            return body
        try:
            return base64.b64decode(body, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            return body
    return body

def cors_headers(origin: Optional[str]) -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": origin or "*",
        "Vary": "Origin",
        "Access-Control-Allow-Headers": "Content-Type, Authorization",
        "Access-Control-Allow-Methods": "POST, OPTIONS",
        "Content-Type": "application/json; charset=utf-8",
    }

def respond(status: int, headers: Dict[str, str], body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "statusCode": status,
        "headers": dict(headers),
        "body": "" if body is None else json.dumps(body, ensure_ascii=False, allow_nan=False),
    }

def error(status: int, headers: Dict[str, str], message: str, details: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"ok": False, "error": message}
    if details is not None:
        body["details"] = details
    return respond(status, headers, body)
