"""Tests for extension set construction."""

from datetime import UTC, datetime, timedelta

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.x509.oid import ExtendedKeyUsageOID

from devcert.lib.cert_utils import generate_serial_number
from devcert.lib.config import DistinguishedName
from devcert.lib.errors import InvalidParameterError
from devcert.lib.extensions import ExtensionBuilder, to_a_label, validate_dns_names
from devcert.lib.models import IssuedCertificate, KeyPair


class TestRootExtensions:
    """Tests for ExtensionBuilder.build_root_extensions."""

    def test_order_and_criticality(self, rsa_root_key_pair: KeyPair) -> None:
        """KeyUsage and BasicConstraints are critical, SKI is not."""
        extensions = ExtensionBuilder.build_root_extensions(rsa_root_key_pair.public_key)
        assert [(type(ext), critical) for ext, critical in extensions] == [
            (x509.KeyUsage, True),
            (x509.BasicConstraints, True),
            (x509.SubjectKeyIdentifier, False),
        ]

    def test_key_usage_is_cert_sign_only(self, ec_root_key_pair: KeyPair) -> None:
        """Root KeyUsage allows certificate signing and nothing else."""
        key_usage = ExtensionBuilder.build_root_extensions(ec_root_key_pair.public_key)[0][0]
        assert key_usage.key_cert_sign is True
        assert key_usage.crl_sign is False
        assert key_usage.digital_signature is False

    def test_basic_constraints(self, ec_root_key_pair: KeyPair) -> None:
        """Root is a CA with path length 0."""
        basic_constraints = ExtensionBuilder.build_root_extensions(ec_root_key_pair.public_key)[1][0]
        assert basic_constraints.ca is True
        assert basic_constraints.path_length == 0


class TestLeafExtensions:
    """Tests for ExtensionBuilder.build_leaf_extensions."""

    def test_order_and_criticality(
        self, rsa_root: IssuedCertificate, rsa_leaf_key_pair: KeyPair
    ) -> None:
        """Only KeyUsage is critical on the leaf."""
        extensions = ExtensionBuilder.build_leaf_extensions(
            rsa_root.certificate, rsa_leaf_key_pair.public_key, ["localhost"]
        )
        assert [(type(ext), critical) for ext, critical in extensions] == [
            (x509.BasicConstraints, False),
            (x509.KeyUsage, True),
            (x509.ExtendedKeyUsage, False),
            (x509.AuthorityKeyIdentifier, False),
            (x509.SubjectAlternativeName, False),
        ]

    def test_server_auth_only(self, rsa_root: IssuedCertificate, rsa_leaf_key_pair: KeyPair) -> None:
        """ExtendedKeyUsage lists TLS server authentication only."""
        extensions = ExtensionBuilder.build_leaf_extensions(
            rsa_root.certificate, rsa_leaf_key_pair.public_key, ["localhost"]
        )
        assert list(extensions[2][0]) == [ExtendedKeyUsageOID.SERVER_AUTH]

    def test_aki_copies_issuer_ski(self, ec_root: IssuedCertificate, ec_leaf_key_pair: KeyPair) -> None:
        """AKI key identifier equals the issuer SKI, without issuer name or serial."""
        extensions = ExtensionBuilder.build_leaf_extensions(
            ec_root.certificate, ec_leaf_key_pair.public_key, ["localhost"]
        )
        aki = extensions[3][0]
        ski = ec_root.certificate.extensions.get_extension_for_class(x509.SubjectKeyIdentifier).value
        assert aki.key_identifier == ski.digest
        assert aki.authority_cert_issuer is None
        assert aki.authority_cert_serial_number is None

    def test_aki_falls_back_to_issuer_public_key(
        self,
        ec_root_key_pair: KeyPair,
        ec_leaf_key_pair: KeyPair,
        root_dn: DistinguishedName,
    ) -> None:
        """An issuer without SKI still yields a key-identifier AKI."""
        now = datetime.now(UTC)
        bare_issuer = (
            x509.CertificateBuilder()
            .subject_name(root_dn.to_x509_name())
            .issuer_name(root_dn.to_x509_name())
            .public_key(ec_root_key_pair.public_key)
            .serial_number(generate_serial_number())
            .not_valid_before(now)
            .not_valid_after(now + timedelta(days=1))
            .sign(ec_root_key_pair.private_key, hashes.SHA256())
        )
        extensions = ExtensionBuilder.build_leaf_extensions(
            bare_issuer, ec_leaf_key_pair.public_key, ["localhost"]
        )
        expected = x509.SubjectKeyIdentifier.from_public_key(ec_root_key_pair.public_key)
        assert extensions[3][0].key_identifier == expected.digest

    def test_san_keeps_names_in_order(
        self, rsa_root: IssuedCertificate, rsa_leaf_key_pair: KeyPair
    ) -> None:
        """SAN holds exactly the supplied DNS names."""
        extensions = ExtensionBuilder.build_leaf_extensions(
            rsa_root.certificate, rsa_leaf_key_pair.public_key, ["api.test.local", "localhost"]
        )
        san = extensions[4][0]
        assert san.get_values_for_type(x509.DNSName) == ["api.test.local", "localhost"]

    @pytest.mark.parametrize("dns_names", [[], ["  "], ["ok.local", ""]])
    def test_rejects_empty_or_blank_names(
        self,
        rsa_root: IssuedCertificate,
        rsa_leaf_key_pair: KeyPair,
        dns_names: list[str],
    ) -> None:
        """No default name is invented; empty input is an error."""
        with pytest.raises(InvalidParameterError):
            ExtensionBuilder.build_leaf_extensions(
                rsa_root.certificate, rsa_leaf_key_pair.public_key, dns_names
            )

    def test_rejects_bare_string(self, rsa_root: IssuedCertificate, rsa_leaf_key_pair: KeyPair) -> None:
        """A single string is not split into characters."""
        with pytest.raises(InvalidParameterError):
            ExtensionBuilder.build_leaf_extensions(
                rsa_root.certificate, rsa_leaf_key_pair.public_key, "localhost"
            )


class TestDnsNameEncoding:
    """Tests for IDNA handling of DNS names."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("localhost", "localhost"),
            ("bücher.test", "xn--bcher-kva.test"),
            ("*.bücher.test", "*.xn--bcher-kva.test"),
        ],
    )
    def test_a_label_form(self, name: str, expected: str) -> None:
        """Internationalized names are converted, ASCII names are kept."""
        assert to_a_label(name) == expected

    def test_unencodable_name_rejected(self) -> None:
        """A label too long once encoded is a parameter error."""
        with pytest.raises(InvalidParameterError, match="invalid DNS name"):
            validate_dns_names(["ü" * 64 + ".test"])

    def test_san_holds_encoded_name(
        self, ec_root: IssuedCertificate, ec_leaf_key_pair: KeyPair
    ) -> None:
        """The SAN extension carries the A-label, not the raw Unicode name."""
        extensions = ExtensionBuilder.build_leaf_extensions(
            ec_root.certificate, ec_leaf_key_pair.public_key, ["bücher.test", "localhost"]
        )
        san = extensions[4][0]
        assert san.get_values_for_type(x509.DNSName) == ["xn--bcher-kva.test", "localhost"]
