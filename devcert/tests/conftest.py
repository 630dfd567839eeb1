"""Test fixtures for devcert tests."""

from pathlib import Path

import pytest

from devcert.lib.cert_utils import generate_key_pair
from devcert.lib.certificate_builder import CertificateBuilder
from devcert.lib.config import (
    Algorithm,
    CAConfig,
    DistinguishedName,
    HashAlgorithm,
    IssuanceOptions,
    NamedCurve,
)
from devcert.lib.models import IssuedCertificate, KeyPair


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Return a not-yet-created output directory inside tmp_path."""
    return tmp_path / "output"


@pytest.fixture
def ca_config(output_dir: Path) -> CAConfig:
    """Return test CA configuration with small root keys."""
    return CAConfig(
        output_dir=output_dir,
        root_name="root-ca",
        root_common_name="Test Development Root CA",
        root_rsa_key_size=2048,  # Faster for tests
        root_ec_curve=NamedCurve.P256,
    )


@pytest.fixture
def root_dn() -> DistinguishedName:
    """Return test root CA distinguished name."""
    return DistinguishedName(
        organization="Test Org",
        organizational_unit="Test Unit",
        common_name="Test Root CA",
    )


@pytest.fixture
def leaf_dn() -> DistinguishedName:
    """Return test leaf distinguished name."""
    return DistinguishedName(
        organization="Test Org",
        organizational_unit="Test Unit",
        common_name="test-service",
    )


@pytest.fixture
def rsa_root_key_pair() -> KeyPair:
    """Generate RSA key pair for the root CA."""
    return generate_key_pair(Algorithm.RSA, 2048)


@pytest.fixture
def ec_root_key_pair() -> KeyPair:
    """Generate EC key pair for the root CA."""
    return generate_key_pair(Algorithm.EC, NamedCurve.P256)


@pytest.fixture
def rsa_root(rsa_root_key_pair: KeyPair, root_dn: DistinguishedName) -> IssuedCertificate:
    """Generate self-signed RSA root CA."""
    return CertificateBuilder.issue_root(
        subject=root_dn,
        key_pair=rsa_root_key_pair,
        hash_algorithm=HashAlgorithm.SHA256,
    )


@pytest.fixture
def ec_root(ec_root_key_pair: KeyPair, root_dn: DistinguishedName) -> IssuedCertificate:
    """Generate self-signed EC root CA."""
    return CertificateBuilder.issue_root(
        subject=root_dn,
        key_pair=ec_root_key_pair,
        hash_algorithm=HashAlgorithm.SHA384,
    )


@pytest.fixture
def rsa_leaf_key_pair() -> KeyPair:
    """Generate RSA key pair for a leaf certificate."""
    return generate_key_pair(Algorithm.RSA, 2048)


@pytest.fixture
def ec_leaf_key_pair() -> KeyPair:
    """Generate EC key pair for a leaf certificate."""
    return generate_key_pair(Algorithm.EC, NamedCurve.P256)


@pytest.fixture
def rsa_leaf(
    rsa_root: IssuedCertificate,
    leaf_dn: DistinguishedName,
    rsa_leaf_key_pair: KeyPair,
) -> IssuedCertificate:
    """Generate RSA leaf certificate signed by the RSA root."""
    return CertificateBuilder.issue_leaf(
        issuer=rsa_root,
        subject=leaf_dn,
        key_pair=rsa_leaf_key_pair,
        hash_algorithm=HashAlgorithm.SHA256,
        dns_names=["api.test.local", "localhost"],
    )


@pytest.fixture
def ec_leaf(
    ec_root: IssuedCertificate,
    leaf_dn: DistinguishedName,
    ec_leaf_key_pair: KeyPair,
) -> IssuedCertificate:
    """Generate EC leaf certificate signed by the EC root."""
    return CertificateBuilder.issue_leaf(
        issuer=ec_root,
        subject=leaf_dn,
        key_pair=ec_leaf_key_pair,
        hash_algorithm=HashAlgorithm.SHA256,
        dns_names=["svc.local"],
    )


@pytest.fixture
def ec_options() -> IssuanceOptions:
    """Return EC issuance options for the 'svc' certificate."""
    return IssuanceOptions(
        certificate_name="svc",
        algorithm=Algorithm.EC,
        curve=NamedCurve.P256,
        dns_names=("svc.local",),
        organization_name="Test Org",
        organization_unit_name="Test Unit",
        common_name="svc",
    )


@pytest.fixture
def rsa_options() -> IssuanceOptions:
    """Return RSA issuance options for the 'api' certificate."""
    return IssuanceOptions(
        certificate_name="api",
        algorithm=Algorithm.RSA,
        key_size=2048,
        hash_algorithm=HashAlgorithm.SHA384,
        dns_names=("api.test.local", "localhost"),
        organization_name="Test Org",
        organization_unit_name="Test Unit",
        common_name="api",
    )
