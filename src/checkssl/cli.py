from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from cryptography import x509
from cryptography.hazmat.primitives import serialization

from . import __version__
from .errors import DecodeError, ExtractionError
from .extract import extract
from .fetch import DEFAULT_PORT, fetch_presented_chain
from .models import Target
from .utils import get_logger, set_log_level

log = get_logger("cli")

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_FETCH_FAILED = 3
EXIT_EXTRACT_FAILED = 4


def _write_output(out_path: str | None, payload: Any) -> None:
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if out_path:
        Path(out_path).write_text(text + "\n", encoding="utf-8")
    else:
        print(text)


def parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="checkssl",
        description="Summarize the leaf and intermediate certificates a TLS server presents.",
    )
    p.add_argument(
        "target",
        nargs="?",
        help=f"Target as host or host:port (default port: {DEFAULT_PORT})",
    )
    p.add_argument("--sni", help="Override SNI/server name (default: host)")
    p.add_argument("--timeout", type=float, default=10, help="Connect timeout seconds (default: 10)")
    p.add_argument("--out", "-o", help="Write JSON output to file (default: stdout)")
    p.add_argument("--pem", help="Read the chain from a PEM bundle instead of connecting")
    p.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for stderr output (default: $CHECKSSL_LOG or WARNING)",
    )
    p.add_argument("--version", action="store_true", help="Print version and exit")
    return p.parse_args(argv)


def _parse_target(target: str) -> tuple[str, int]:
    host, sep, port_s = target.rpartition(":")
    if not sep:
        host, port_s = target, str(DEFAULT_PORT)
    host = host.strip().strip("[]")
    port_s = port_s.strip()
    if not host:
        raise ValueError("host is empty")
    if not port_s.isdigit():
        raise ValueError("port must be a number")
    port = int(port_s)
    if not (1 <= port <= 65535):
        raise ValueError("port out of range")
    return host, port


def _read_pem_chain(path: str) -> list[bytes]:
    try:
        certs = x509.load_pem_x509_certificates(Path(path).read_bytes())
    except ValueError as e:
        raise DecodeError(str(e)) from e
    return [c.public_bytes(serialization.Encoding.DER) for c in certs]


def _summarize(chain: list[bytes], payload: dict[str, Any]) -> int:
    try:
        summary = extract(chain)
    except ExtractionError as e:
        log.error("could not summarize chain: %s", e)
        payload["errors"].append(str(e))
        return EXIT_EXTRACT_FAILED
    payload["result"] = summary.to_dict()
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)

    if args.version:
        print(__version__)
        return EXIT_OK

    if args.log_level:
        set_log_level(args.log_level)

    payload: dict[str, Any] = {
        "target": None,
        "version": __version__,
        "tls": None,
        "result": None,
        "errors": [],
    }

    if args.pem:
        payload["target"] = {"pem": args.pem}
        try:
            chain = _read_pem_chain(args.pem)
        except (OSError, DecodeError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return EXIT_USAGE
        rc = _summarize(chain, payload)
        _write_output(args.out, payload)
        return rc

    if not args.target:
        print("Error: a target or --pem is required", file=sys.stderr)
        return EXIT_USAGE

    try:
        host, port = _parse_target(args.target)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    target = Target(host=host, port=port, sni=args.sni or host)
    payload["target"] = {"host": target.host, "port": target.port, "sni": target.sni}

    fetched = fetch_presented_chain(
        host=target.host, port=target.port, sni=target.sni, timeout_seconds=args.timeout
    )
    if not fetched.get("ok"):
        payload["errors"].append(fetched.get("error", "unknown error"))
        _write_output(args.out, payload)
        return EXIT_FETCH_FAILED

    payload["tls"] = fetched["tls"]
    rc = _summarize(fetched["chain"], payload)
    _write_output(args.out, payload)
    return rc


if __name__ == "__main__":
    raise SystemExit(main())
