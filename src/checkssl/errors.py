from __future__ import annotations


class CheckSSLError(Exception):
    """Base class for everything this package raises."""


class FetchError(CheckSSLError):
    """The connection or TLS handshake with the server failed."""


class ExtractionError(CheckSSLError):
    """The presented chain could not be turned into a summary."""


class NoCertificatesFound(ExtractionError):
    """The server presented no certificate at all."""

    def __init__(self, message: str = "certificate not found") -> None:
        super().__init__(message)


class DecodeError(ExtractionError):
    """
    A certificate in the chain is not valid DER, or its names or extensions
    cannot be parsed. `detail` carries the decoder's own message.
    """

    def __init__(self, detail: str, index: int | None = None) -> None:
        self.detail = detail
        self.index = index
        where = f"certificate #{index}: " if index is not None else ""
        super().__init__(f"{where}{detail}")


class OidResolutionError(ExtractionError):
    """An algorithm or attribute-type OID has no known short name."""

    def __init__(self, detail: str, oid: str | None = None) -> None:
        self.detail = detail
        self.oid = oid
        super().__init__(detail)
