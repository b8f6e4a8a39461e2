from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any

from .utils import dt_to_utc_iso, utc_iso_to_dt


@dataclass(frozen=True)
class Target:
    host: str
    port: int
    sni: str


@dataclass(frozen=True)
class CertificateSummary:
    """
    Fields shared by both certificate roles.

    String fields are empty when the name attribute is absent.
    """
    common_name: str = ""
    signature_algorithm: str = ""
    country: str = ""
    state: str = ""
    locality: str = ""
    organization: str = ""
    not_before: datetime | None = None  # UTC
    not_after: datetime | None = None   # UTC
    issuer_common_name: str = ""
    is_valid: bool = False
    time_to_expiration: str | None = None  # "<n> day(s)" while not expired

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, datetime):
                value = dt_to_utc_iso(value)
            elif isinstance(value, tuple):
                value = list(value)
            out[f.name] = value
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in data:
                continue
            value = data[f.name]
            if f.name in ("not_before", "not_after") and value is not None:
                value = utc_iso_to_dt(value)
            elif f.name == "subject_alternative_names":
                value = tuple(value)
            kwargs[f.name] = value
        return cls(**kwargs)


@dataclass(frozen=True)
class IntermediateCertificate(CertificateSummary):
    """
    Summary of the CA certificate found in the presented chain.
    """


@dataclass(frozen=True)
class ServerCertificate(CertificateSummary):
    """
    Summary of the leaf certificate, the one identifying the connected host.
    """
    subject_alternative_names: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ChainSummary:
    """
    One server record paired with one intermediate record.
    """
    server: ServerCertificate
    intermediate: IntermediateCertificate

    def to_dict(self) -> dict[str, Any]:
        return {
            "server": self.server.to_dict(),
            "intermediate": self.intermediate.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChainSummary:
        return cls(
            server=ServerCertificate.from_dict(data["server"]),
            intermediate=IntermediateCertificate.from_dict(data["intermediate"]),
        )
