from datetime import datetime, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

UTC = timezone.utc


def utc(year, month=1, day=1, *rest):
    return datetime(year, month, day, *rest, tzinfo=UTC)


@pytest.fixture(scope="session")
def signing_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def simple_name(common_name, organization=None, country=None, state=None, locality=None):
    attrs = []
    if country:
        attrs.append(x509.NameAttribute(NameOID.COUNTRY_NAME, country))
    if state:
        attrs.append(x509.NameAttribute(NameOID.STATE_OR_PROVINCE_NAME, state))
    if locality:
        attrs.append(x509.NameAttribute(NameOID.LOCALITY_NAME, locality))
    if organization:
        attrs.append(x509.NameAttribute(NameOID.ORGANIZATION_NAME, organization))
    if common_name:
        attrs.append(x509.NameAttribute(NameOID.COMMON_NAME, common_name))
    return x509.Name(attrs)


@pytest.fixture
def make_cert(signing_key):
    """
    Build a DER certificate.

    `ca` is True/False for a basic-constraints extension with that flag, or
    None to leave the extension out. `sans` is a list of GeneralName objects.
    """

    def _make(
        subject,
        issuer=None,
        not_before=utc(2024),
        not_after=utc(2030),
        ca=None,
        sans=None,
    ):
        if isinstance(subject, str):
            subject = simple_name(subject)
        if isinstance(issuer, str):
            issuer = simple_name(issuer)
        builder = (
            x509.CertificateBuilder()
            .subject_name(subject)
            .issuer_name(issuer or subject)
            .public_key(signing_key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(not_before)
            .not_valid_after(not_after)
        )
        if ca is not None:
            builder = builder.add_extension(
                x509.BasicConstraints(ca=ca, path_length=None), critical=True
            )
        if sans is not None:
            builder = builder.add_extension(x509.SubjectAlternativeName(sans), critical=False)
        cert = builder.sign(signing_key, hashes.SHA256())
        return cert.public_bytes(serialization.Encoding.DER)

    return _make


@pytest.fixture
def example_chain(make_cert):
    """Leaf for example.com issued by Example CA, plus the CA itself."""
    ca_name = simple_name("Example CA", organization="Example Trust", country="US")
    leaf_name = simple_name(
        "example.com",
        organization="Example Inc",
        country="US",
        state="California",
        locality="San Francisco",
    )
    leaf = make_cert(
        leaf_name,
        issuer=ca_name,
        not_before=utc(2024),
        not_after=utc(2030),
        ca=False,
        sans=[x509.DNSName("example.com"), x509.DNSName("www.example.com")],
    )
    ca = make_cert(
        ca_name,
        issuer=simple_name("Example Root"),
        not_before=utc(2020),
        not_after=utc(2035),
        ca=True,
    )
    return [leaf, ca]


@pytest.fixture
def bad_subject_der(make_cert):
    """A leaf that loads, but whose subject CN is not valid UTF-8."""
    der = make_cert("QQQQQQ", issuer="Test Issuer")
    assert der.count(b"QQQQQQ") == 1
    return der.replace(b"QQQQQQ", b"\xff\xfe" * 3)
