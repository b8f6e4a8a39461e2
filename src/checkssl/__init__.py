from __future__ import annotations

__version__ = "0.1.0"

from .errors import (  # noqa: E402
    CheckSSLError,
    DecodeError,
    ExtractionError,
    FetchError,
    NoCertificatesFound,
    OidResolutionError,
)
from .extract import extract  # noqa: E402
from .fetch import from_domain  # noqa: E402
from .models import ChainSummary, IntermediateCertificate, ServerCertificate  # noqa: E402
from .oids import OidResolver  # noqa: E402
from .validity import evaluate  # noqa: E402

__all__ = [
    "__version__",
    "ChainSummary",
    "CheckSSLError",
    "DecodeError",
    "ExtractionError",
    "FetchError",
    "IntermediateCertificate",
    "NoCertificatesFound",
    "OidResolutionError",
    "OidResolver",
    "ServerCertificate",
    "evaluate",
    "extract",
    "from_domain",
]
