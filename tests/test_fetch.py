import socket

import pytest

from checkssl import FetchError, NoCertificatesFound, fetch
from conftest import utc


class FakeTLSSocket:
    def __init__(self, leaf, chain=None):
        self._leaf = leaf
        if chain is not None:
            self.get_unverified_chain = lambda: chain

    def getpeercert(self, binary_form=False):
        assert binary_form
        return self._leaf


def test_presented_ders_puts_leaf_first_once():
    ssock = FakeTLSSocket(b"leaf", chain=[b"leaf", b"ca", b""])
    assert fetch._presented_ders(ssock) == [b"leaf", b"ca"]


def test_presented_ders_without_chain_support():
    assert fetch._presented_ders(FakeTLSSocket(b"leaf")) == [b"leaf"]


def test_presented_ders_no_certificate():
    assert fetch._presented_ders(FakeTLSSocket(None, chain=None)) == []


def test_no_verify_context():
    ctx = fetch._no_verify_context()
    assert ctx.check_hostname is False
    assert ctx.verify_mode.name == "CERT_NONE"


def test_connection_failure_is_reported(monkeypatch):
    def refuse(address, timeout=None):
        raise ConnectionRefusedError(111, "Connection refused")

    monkeypatch.setattr(socket, "create_connection", refuse)
    result = fetch.fetch_presented_chain(host="localhost", port=1, sni="localhost", timeout_seconds=1)
    assert result["ok"] is False
    assert "Connection refused" in result["error"]


def test_from_domain_raises_fetch_error(monkeypatch):
    monkeypatch.setattr(
        fetch, "fetch_presented_chain", lambda **kw: {"ok": False, "error": "timed out"}
    )
    with pytest.raises(FetchError, match="timed out"):
        fetch.from_domain("example.com")


def test_from_domain_summarizes_chain(monkeypatch, example_chain):
    calls = {}

    def fake_fetch(**kw):
        calls.update(kw)
        return {"ok": True, "tls": {"version": "TLSv1.3", "cipher": None}, "chain": example_chain}

    monkeypatch.setattr(fetch, "fetch_presented_chain", fake_fetch)
    summary = fetch.from_domain("example.com", now=utc(2025))

    assert calls == {"host": "example.com", "port": 443, "sni": "example.com", "timeout_seconds": 10}
    assert summary.server.common_name == "example.com"
    assert summary.intermediate.common_name == "Example CA"


def test_from_domain_without_certificates(monkeypatch):
    monkeypatch.setattr(
        fetch, "fetch_presented_chain", lambda **kw: {"ok": True, "tls": {}, "chain": []}
    )
    with pytest.raises(NoCertificatesFound):
        fetch.from_domain("example.com", 8443, sni="www.example.com")
