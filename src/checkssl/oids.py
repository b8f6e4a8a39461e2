from __future__ import annotations

from collections.abc import Mapping

from cryptography import x509
from cryptography.x509.oid import NameOID, SignatureAlgorithmOID

from .errors import OidResolutionError

# Short names for name attribute types, keyed by dotted OID.
NAME_ATTRIBUTE_NAMES: dict[str, str] = {
    NameOID.COMMON_NAME.dotted_string: "CN",
    NameOID.COUNTRY_NAME.dotted_string: "C",
    NameOID.STATE_OR_PROVINCE_NAME.dotted_string: "ST",
    NameOID.LOCALITY_NAME.dotted_string: "L",
    NameOID.ORGANIZATION_NAME.dotted_string: "O",
    NameOID.ORGANIZATIONAL_UNIT_NAME.dotted_string: "OU",
    NameOID.STREET_ADDRESS.dotted_string: "street",
    NameOID.SERIAL_NUMBER.dotted_string: "serialNumber",
    NameOID.SURNAME.dotted_string: "SN",
    NameOID.GIVEN_NAME.dotted_string: "GN",
    NameOID.TITLE.dotted_string: "title",
    NameOID.GENERATION_QUALIFIER.dotted_string: "generationQualifier",
    NameOID.X500_UNIQUE_IDENTIFIER.dotted_string: "x500UniqueIdentifier",
    NameOID.DN_QUALIFIER.dotted_string: "dnQualifier",
    NameOID.PSEUDONYM.dotted_string: "pseudonym",
    NameOID.USER_ID.dotted_string: "UID",
    NameOID.DOMAIN_COMPONENT.dotted_string: "DC",
    NameOID.EMAIL_ADDRESS.dotted_string: "emailAddress",
    NameOID.JURISDICTION_COUNTRY_NAME.dotted_string: "jurisdictionC",
    NameOID.JURISDICTION_LOCALITY_NAME.dotted_string: "jurisdictionL",
    NameOID.JURISDICTION_STATE_OR_PROVINCE_NAME.dotted_string: "jurisdictionST",
    NameOID.BUSINESS_CATEGORY.dotted_string: "businessCategory",
    NameOID.POSTAL_ADDRESS.dotted_string: "postalAddress",
    NameOID.POSTAL_CODE.dotted_string: "postalCode",
    "2.5.4.43": "initials",
    "2.5.4.97": "organizationIdentifier",
    "1.2.840.113549.1.9.2": "unstructuredName",
}

SIGNATURE_ALGORITHM_NAMES: dict[str, str] = {
    SignatureAlgorithmOID.RSA_WITH_MD5.dotted_string: "md5WithRSAEncryption",
    SignatureAlgorithmOID.RSA_WITH_SHA1.dotted_string: "sha1WithRSAEncryption",
    SignatureAlgorithmOID.RSA_WITH_SHA224.dotted_string: "sha224WithRSAEncryption",
    SignatureAlgorithmOID.RSA_WITH_SHA256.dotted_string: "sha256WithRSAEncryption",
    SignatureAlgorithmOID.RSA_WITH_SHA384.dotted_string: "sha384WithRSAEncryption",
    SignatureAlgorithmOID.RSA_WITH_SHA512.dotted_string: "sha512WithRSAEncryption",
    SignatureAlgorithmOID.RSASSA_PSS.dotted_string: "rsassa-pss",
    SignatureAlgorithmOID.ECDSA_WITH_SHA1.dotted_string: "ecdsa-with-SHA1",
    SignatureAlgorithmOID.ECDSA_WITH_SHA224.dotted_string: "ecdsa-with-SHA224",
    SignatureAlgorithmOID.ECDSA_WITH_SHA256.dotted_string: "ecdsa-with-SHA256",
    SignatureAlgorithmOID.ECDSA_WITH_SHA384.dotted_string: "ecdsa-with-SHA384",
    SignatureAlgorithmOID.ECDSA_WITH_SHA512.dotted_string: "ecdsa-with-SHA512",
    SignatureAlgorithmOID.DSA_WITH_SHA1.dotted_string: "dsaWithSHA1",
    SignatureAlgorithmOID.DSA_WITH_SHA224.dotted_string: "dsa_with_SHA224",
    SignatureAlgorithmOID.DSA_WITH_SHA256.dotted_string: "dsa_with_SHA256",
    SignatureAlgorithmOID.ED25519.dotted_string: "ED25519",
    SignatureAlgorithmOID.ED448.dotted_string: "ED448",
    "1.3.14.3.2.29": "sha1WithRSA",
}


class OidResolver:
    """
    Maps algorithm and attribute-type OIDs to short names.

    `names` replaces the built-in tables when given. `extra` entries are
    consulted first, so callers can name private or newer OIDs without
    patching this module.
    """

    def __init__(
        self,
        names: Mapping[str, str] | None = None,
        extra: Mapping[str, str] | None = None,
    ) -> None:
        if names is None:
            names = {**NAME_ATTRIBUTE_NAMES, **SIGNATURE_ALGORITHM_NAMES}
        self._names: dict[str, str] = {**names, **(extra or {})}

    def resolve(self, oid: x509.ObjectIdentifier | str) -> str:
        dotted = oid.dotted_string if isinstance(oid, x509.ObjectIdentifier) else oid
        try:
            return self._names[dotted]
        except KeyError:
            raise OidResolutionError(f"Error converting OID {dotted} to a name", oid=dotted) from None


DEFAULT_RESOLVER = OidResolver()


def resolve(oid: x509.ObjectIdentifier | str) -> str:
    return DEFAULT_RESOLVER.resolve(oid)
