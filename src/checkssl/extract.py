from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from cryptography import x509

from .errors import DecodeError, NoCertificatesFound
from .models import ChainSummary, IntermediateCertificate, ServerCertificate
from .oids import DEFAULT_RESOLVER, OidResolver
from .validity import evaluate

# Subject attribute short name -> record field.
SUBJECT_FIELDS = {
    "C": "country",
    "ST": "state",
    "L": "locality",
    "CN": "common_name",
    "O": "organization",
}

# Names and extensions are parsed lazily by cryptography, so malformed ones
# only surface when they are read.
_LAZY_PARSE_ERRORS = (ValueError, x509.DuplicateExtension, x509.UnsupportedGeneralNameType)


@dataclass(frozen=True)
class _Decoded:
    cert: x509.Certificate
    subject: x509.Name
    issuer: x509.Name
    is_ca: bool
    sans: tuple[str, ...]


def _is_ca(cert: x509.Certificate) -> bool:
    try:
        bc = cert.extensions.get_extension_for_class(x509.BasicConstraints).value
    except x509.ExtensionNotFound:
        return False
    return bool(bc.ca)


def _get_san_dns(cert: x509.Certificate) -> tuple[str, ...]:
    try:
        ext = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName)
    except x509.ExtensionNotFound:
        return ()
    return tuple(ext.value.get_values_for_type(x509.DNSName))


def _decode(index: int, der: bytes) -> _Decoded:
    try:
        cert = x509.load_der_x509_certificate(bytes(der))
    except ValueError as e:
        raise DecodeError(str(e), index=index) from e

    try:
        subject = cert.subject
        issuer = cert.issuer
        is_ca = _is_ca(cert)
        sans = () if is_ca else _get_san_dns(cert)
    except _LAZY_PARSE_ERRORS as e:
        raise DecodeError(str(e), index=index) from e

    return _Decoded(cert=cert, subject=subject, issuer=issuer, is_ca=is_ca, sans=sans)


def _fold_name(name: x509.Name, resolver: OidResolver) -> Iterable[tuple[str, Any]]:
    # every attribute of every RDN, multi-valued RDNs included
    for rdn in name.rdns:
        for attr in rdn:
            yield resolver.resolve(attr.oid), attr.value


def _common_fields(decoded: _Decoded, now: datetime, resolver: OidResolver) -> dict[str, Any]:
    cert = decoded.cert
    not_before = cert.not_valid_before_utc
    not_after = cert.not_valid_after_utc
    is_valid, time_to_expiration = evaluate(not_before, not_after, now)

    fields: dict[str, Any] = {
        "signature_algorithm": resolver.resolve(cert.signature_algorithm_oid),
        "not_before": not_before,
        "not_after": not_after,
        "is_valid": is_valid,
        "time_to_expiration": time_to_expiration,
    }

    for short_name, value in _fold_name(decoded.issuer, resolver):
        if short_name == "CN":
            fields["issuer_common_name"] = value

    for short_name, value in _fold_name(decoded.subject, resolver):
        field_name = SUBJECT_FIELDS.get(short_name)
        if field_name is not None:
            fields[field_name] = value

    return fields


def _summarize(
    decoded: _Decoded, now: datetime, resolver: OidResolver
) -> ServerCertificate | IntermediateCertificate:
    fields = _common_fields(decoded, now, resolver)
    if decoded.is_ca:
        return IntermediateCertificate(**fields)
    return ServerCertificate(subject_alternative_names=decoded.sans, **fields)


def extract(
    chain: Sequence[bytes],
    now: datetime | None = None,
    *,
    resolver: OidResolver = DEFAULT_RESOLVER,
) -> ChainSummary:
    """
    Summarize a presented certificate chain.

    `chain` holds DER certificates in the order the server sent them. Each
    one is classified by its basic-constraints CA flag; the first leaf
    becomes the server record and the first CA the intermediate record.
    A role missing from the chain is reported as an empty record.

    Every certificate must decode and have resolvable OIDs, otherwise the
    whole call fails with DecodeError or OidResolutionError. An empty chain
    raises NoCertificatesFound. Expired certificates are not errors; they
    come back with is_valid=False.
    """
    if not chain:
        raise NoCertificatesFound()
    if now is None:
        now = datetime.now(timezone.utc)

    decoded = [_decode(i, der) for i, der in enumerate(chain)]
    records = [_summarize(d, now, resolver) for d in decoded]

    leaves = [r for r in records if isinstance(r, ServerCertificate)]
    cas = [r for r in records if isinstance(r, IntermediateCertificate)]

    return ChainSummary(
        server=leaves[0] if leaves else ServerCertificate(),
        intermediate=cas[0] if cas else IntermediateCertificate(),
    )
