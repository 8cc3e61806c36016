from __future__ import annotations

from flask import Request


def get_client_ip(request: Request, trust_headers: bool = False) -> str | None:
    # Forwarding headers are client-controlled unless a proxy we trust sets them.
    if trust_headers:
        cf_ip = request.headers.get("CF-Connecting-IP")
        if cf_ip:
            return cf_ip.strip()

        x_real_ip = request.headers.get("X-Real-IP")
        if x_real_ip:
            return x_real_ip.strip()

    if request.remote_addr:
        return request.remote_addr

    return None
