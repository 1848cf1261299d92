"""Client identification for rate limiting."""

from __future__ import annotations

from fastapi import Request


UNKNOWN_CLIENT = "unknown"


def get_client_ip(request: Request) -> str:
    """
    Extract client IP from request, respecting proxy headers.

    Priority: Cloudflare > X-Forwarded-For > X-Real-IP > Direct
    """
    # Cloudflare
    if cf_ip := request.headers.get("CF-Connecting-IP"):
        return cf_ip.strip()

    # X-Forwarded-For (take first = original client)
    if forwarded := request.headers.get("X-Forwarded-For"):
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    # Nginx
    if real_ip := request.headers.get("X-Real-IP"):
        return real_ip.strip()

    # Direct connection
    if request.client and request.client.host:
        return request.client.host

    return UNKNOWN_CLIENT
