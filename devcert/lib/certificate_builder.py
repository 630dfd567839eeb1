"""Certificate builder for root CA and leaf certificate construction."""

from collections.abc import Sequence
from datetime import datetime, timedelta, timezone

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from .cert_utils import add_years, generate_serial_number, key_algorithm, key_matches_certificate
from .config import DistinguishedName, HashAlgorithm
from .errors import IssuanceError
from .extensions import ExtensionBuilder, ExtensionSet, validate_dns_names
from .models import IssuedCertificate, KeyPair, PrivateKey


def _validity_window(validity_years: int, backdate_days: int) -> tuple[datetime, datetime]:
    now = datetime.now(timezone.utc)
    return now - timedelta(days=backdate_days), add_years(now, validity_years)


def _sign(
    builder: x509.CertificateBuilder,
    signing_key: PrivateKey,
    hash_algorithm: HashAlgorithm,
) -> x509.Certificate:
    # RSA signs with PKCS#1 v1.5, EC with plain ECDSA
    if isinstance(signing_key, RSAPrivateKey):
        return builder.sign(signing_key, hash_algorithm.to_hash(), rsa_padding=padding.PKCS1v15())
    return builder.sign(signing_key, hash_algorithm.to_hash())


def _with_extensions(
    builder: x509.CertificateBuilder, extensions: ExtensionSet
) -> x509.CertificateBuilder:
    for extension, critical in extensions:
        builder = builder.add_extension(extension, critical=critical)
    return builder


class CertificateBuilder:
    """Builds self-signed root CA certificates and root-signed leaf certificates."""

    @staticmethod
    def issue_root(
        subject: DistinguishedName,
        key_pair: KeyPair,
        hash_algorithm: HashAlgorithm = HashAlgorithm.SHA512,
        validity_years: int = 10,
        backdate_days: int = 1,
    ) -> IssuedCertificate:
        """Build self-signed root CA certificate.

        Args:
            subject: Distinguished name for certificate subject and issuer
            key_pair: Root CA key pair, also used for signing
            hash_algorithm: Signature hash
            validity_years: Calendar years of validity from now
            backdate_days: Days notBefore is moved into the past

        Returns:
            Root certificate bound to its private key
        """
        name = subject.to_x509_name()
        not_before, not_after = _validity_window(validity_years, backdate_days)

        builder = (
            x509.CertificateBuilder()
            .subject_name(name)
            .issuer_name(name)
            .public_key(key_pair.public_key)
            .serial_number(generate_serial_number())
            .not_valid_before(not_before)
            .not_valid_after(not_after)
        )
        builder = _with_extensions(
            builder, ExtensionBuilder.build_root_extensions(key_pair.public_key)
        )

        certificate = _sign(builder, key_pair.private_key, HashAlgorithm.parse(hash_algorithm))
        return IssuedCertificate(
            certificate=certificate,
            private_key=key_pair.private_key,
            algorithm=key_pair.algorithm,
        )

    @staticmethod
    def issue_leaf(
        issuer: IssuedCertificate,
        subject: DistinguishedName,
        key_pair: KeyPair,
        hash_algorithm: HashAlgorithm = HashAlgorithm.SHA256,
        dns_names: Sequence[str] = (),
        validity_years: int = 3,
        backdate_days: int = 1,
    ) -> IssuedCertificate:
        """Build TLS server certificate signed by the root CA.

        The returned certificate carries the leaf's own private key, never
        the issuer's.

        Args:
            issuer: Root CA certificate and its private key
            subject: Distinguished name for the leaf subject
            key_pair: Freshly generated leaf key pair
            hash_algorithm: Signature hash (SHA-256, SHA-384 or SHA-512)
            dns_names: DNS names for the SubjectAlternativeName extension
            validity_years: Calendar years of validity from now
            backdate_days: Days notBefore is moved into the past

        Returns:
            Leaf certificate bound to the leaf private key

        Raises:
            InvalidParameterError: If dns_names is empty
            IssuanceError: If the issuer private key is missing, does not
                belong to the issuer certificate, or signing fails
        """
        names = validate_dns_names(dns_names)
        hash_algorithm = HashAlgorithm.parse(hash_algorithm)

        issuer_key = issuer.private_key
        if issuer_key is None:
            raise IssuanceError("issuer certificate has no private key")
        try:
            key_algorithm(issuer_key)
        except ValueError as e:
            raise IssuanceError(f"issuer private key is unusable: {e}") from e
        if not key_matches_certificate(issuer_key, issuer.certificate):
            raise IssuanceError("issuer private key does not match issuer certificate")

        not_before, not_after = _validity_window(validity_years, backdate_days)

        builder = (
            x509.CertificateBuilder()
            .subject_name(subject.to_x509_name())
            .issuer_name(issuer.certificate.subject)
            .public_key(key_pair.public_key)
            .serial_number(generate_serial_number())
            .not_valid_before(not_before)
            .not_valid_after(not_after)
        )
        builder = _with_extensions(
            builder,
            ExtensionBuilder.build_leaf_extensions(issuer.certificate, key_pair.public_key, names),
        )

        try:
            certificate = _sign(builder, issuer_key, hash_algorithm)
        except (TypeError, ValueError) as e:
            raise IssuanceError(f"failed to sign leaf certificate: {e}") from e

        return IssuedCertificate(
            certificate=certificate,
            private_key=key_pair.private_key,
            algorithm=key_pair.algorithm,
        )
