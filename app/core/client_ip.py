"""Caller identification from proxy headers."""

from __future__ import annotations

from fastapi import Request


def resolve_client_ip(request: Request) -> str | None:
    """Return the originating client IP for a request.

    Prefers the first hop of ``X-Forwarded-For``, then Cloudflare's
    ``CF-Connecting-IP``, then the socket peer address.
    """

    forwarded = request.headers.get("x-forwarded-for") or request.headers.get(
        "cf-connecting-ip"
    )
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop

    if request.client and request.client.host:
        return request.client.host
    return None
