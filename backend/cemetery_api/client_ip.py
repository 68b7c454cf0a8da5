"""Client address resolution shared by rate limiting and audit logging."""
from __future__ import annotations

import ipaddress

from starlette.requests import Request


def _valid_ip(candidate: str) -> bool:
    try:
        ipaddress.ip_address(candidate)
    except ValueError:
        return False
    return True


def get_client_ip(request: Request, *, trust_proxy_headers: bool = False) -> str:
    """Best-effort client IP.

    Proxy headers are only honoured behind a trusted reverse proxy; otherwise
    any client could pick its own rate-limit bucket.
    """
    if trust_proxy_headers:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            # X-Forwarded-For may contain a list: client, proxy1, proxy2
            candidate = forwarded.split(",")[0].strip()
            if _valid_ip(candidate):
                return candidate

        real_ip = request.headers.get("x-real-ip")
        if real_ip and _valid_ip(real_ip.strip()):
            return real_ip.strip()

    if request.client:
        return request.client.host
    return "unknown"
