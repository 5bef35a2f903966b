"""
Client origin resolution.

The portal normally runs behind a tunnel or reverse proxy, so the socket peer
is the proxy. Proxy headers are only honoured when the peer is one of the
configured trusted proxies; any other client could set them to whatever it
likes and get a fresh rate-limit origin on every request.
"""

import ipaddress
from typing import Iterable

from fastapi import Request

UNKNOWN_ORIGIN = "unknown"


def is_trusted_proxy(host: str, trusted_proxies: Iterable[str]) -> bool:
    """trusted_proxies holds addresses or networks such as "10.0.0.0/8" """
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return host in trusted_proxies
    for entry in trusted_proxies:
        try:
            if address in ipaddress.ip_network(entry, strict=False):
                return True
        except ValueError:
            continue
    return False


def resolve_origin(request: Request, trusted_proxies: Iterable[str] = ()) -> str:
    peer = request.client.host if request.client and request.client.host else None
    if peer is None:
        return UNKNOWN_ORIGIN

    if is_trusted_proxy(peer, trusted_proxies):
        headers = request.headers

        cf_ip = headers.get("cf-connecting-ip")
        if cf_ip and cf_ip.strip():
            return cf_ip.strip()

        forwarded = headers.get("x-forwarded-for")
        if forwarded:
            first_hop = forwarded.split(",")[0].strip()
            if first_hop:
                return first_hop

        real_ip = headers.get("x-real-ip")
        if real_ip and real_ip.strip():
            return real_ip.strip()

    return peer


def mask_origin(origin: str) -> str:
    """Partially hide an address for admin listings"""
    return origin[:10] + "..."
