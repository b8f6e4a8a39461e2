from __future__ import annotations

import socket
import ssl
from datetime import datetime
from typing import Any

from .errors import FetchError
from .extract import extract
from .models import ChainSummary
from .oids import DEFAULT_RESOLVER, OidResolver
from .utils import get_logger

log = get_logger("fetch")

DEFAULT_PORT = 443


def _no_verify_context() -> ssl.SSLContext:
    # Expired or untrusted chains must still be readable, so the handshake
    # does not verify anything.
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


def _presented_ders(ssock: ssl.SSLSocket) -> list[bytes]:
    leaf_der = ssock.getpeercert(binary_form=True)

    chain_ders: list[bytes] = []
    if hasattr(ssock, "get_unverified_chain"):
        # Python 3.13+
        chain_ders = list(ssock.get_unverified_chain() or [])  # type: ignore[attr-defined]
    else:
        log.debug("get_unverified_chain unavailable; only the leaf will be inspected")

    # Normalize: ensure leaf is first and included
    ders: list[bytes] = []
    if leaf_der:
        ders.append(leaf_der)
    for d in chain_ders:
        if d and d != leaf_der:
            ders.append(d)
    return ders


def fetch_presented_chain(
    *,
    host: str,
    port: int,
    sni: str,
    timeout_seconds: float,
) -> dict[str, Any]:
    """
    Connect to host:port and return the certificates the server presents.

    Returns {"ok": True, "tls": {...}, "chain": [der, ...]} with the leaf
    first, or {"ok": False, "error": "..."} when the connection or the
    handshake fails.
    """
    ctx = _no_verify_context()
    log.debug("connecting to %s:%d (sni=%s, timeout=%ss)", host, port, sni, timeout_seconds)

    try:
        with socket.create_connection((host, port), timeout=timeout_seconds) as sock:
            with ctx.wrap_socket(sock, server_hostname=sni) as ssock:
                tls_version = ssock.version()
                cipher = ssock.cipher()
                ders = _presented_ders(ssock)
    except OSError as e:
        # ssl.SSLError and socket.timeout are OSError subclasses
        log.warning("TLS connection to %s:%d failed: %s", host, port, e)
        return {"ok": False, "error": str(e) or e.__class__.__name__}

    log.info("%s:%d presented %d certificate(s) over %s", host, port, len(ders), tls_version)
    return {
        "ok": True,
        "tls": {
            "version": tls_version,
            "cipher": cipher[0] if cipher else None,
        },
        "chain": ders,
    }


def from_domain(
    domain: str,
    port: int = DEFAULT_PORT,
    *,
    sni: str | None = None,
    timeout_seconds: float = 10,
    now: datetime | None = None,
    resolver: OidResolver = DEFAULT_RESOLVER,
) -> ChainSummary:
    """
    Fetch the chain presented by `domain` and summarize it.

    Raises FetchError when the server cannot be reached or the handshake
    fails, NoCertificatesFound when it presents no certificate, and the
    other ExtractionError subclasses when the chain cannot be read.
    """
    fetched = fetch_presented_chain(
        host=domain, port=port, sni=sni or domain, timeout_seconds=timeout_seconds
    )
    if not fetched["ok"]:
        raise FetchError(fetched["error"])
    return extract(fetched["chain"], now, resolver=resolver)
