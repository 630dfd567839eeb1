"""X.509v3 extension sets for root CA and leaf certificates."""

from collections.abc import Sequence

import idna
from cryptography import x509
from cryptography.x509.oid import ExtendedKeyUsageOID

from .errors import InvalidParameterError
from .models import PublicKey

ExtensionSet = list[tuple[x509.ExtensionType, bool]]


def to_a_label(name: str) -> str:
    """Return the ASCII (A-label) form of a DNS name.

    ASCII names are returned unchanged. Internationalized names are
    IDNA-encoded label by label; a leading "*." wildcard label is kept as is.

    Raises:
        InvalidParameterError: If the name cannot be IDNA-encoded
    """
    if name.isascii():
        return name

    wildcard, rest = ("*.", name[2:]) if name.startswith("*.") else ("", name)
    try:
        return wildcard + idna.encode(rest, uts46=True).decode("ascii")
    except idna.IDNAError as e:
        raise InvalidParameterError(f"invalid DNS name {name!r}: {e}") from e


def validate_dns_names(dns_names: Sequence[str]) -> list[str]:
    """Return the DNS names in A-label form, rejecting an empty list or blank entries."""
    if isinstance(dns_names, str):
        raise InvalidParameterError("dns_names must be a sequence of names, not a string")
    names = list(dns_names)
    if not names:
        raise InvalidParameterError("at least one DNS name is required")
    if any(not name or not name.strip() for name in names):
        raise InvalidParameterError(f"DNS names must not be blank: {names!r}")
    return [to_a_label(name) for name in names]

class ExtensionBuilder:
    """Builds ordered (extension, critical) pairs for certificate construction."""

    @staticmethod
    def build_root_extensions(public_key: PublicKey) -> ExtensionSet:
        """Return root CA extensions: KeyUsage, BasicConstraints, SubjectKeyIdentifier.

        Args:
            public_key: Public key of the root CA

        Returns:
            Extension list in the order they are added to the certificate
        """
        return [
            (
                x509.KeyUsage(
                    digital_signature=False,
                    content_commitment=False,
                    key_encipherment=False,
                    data_encipherment=False,
                    key_agreement=False,
                    key_cert_sign=True,
                    crl_sign=False,
                    encipher_only=False,
                    decipher_only=False,
                ),
                True,
            ),
            (x509.BasicConstraints(ca=True, path_length=0), True),
            (x509.SubjectKeyIdentifier.from_public_key(public_key), False),
        ]

    @staticmethod
    def build_leaf_extensions(
        issuer_certificate: x509.Certificate,
        public_key: PublicKey,
        dns_names: Sequence[str],
    ) -> ExtensionSet:
        """Return TLS server leaf extensions.

        Order: BasicConstraints, KeyUsage, ExtendedKeyUsage (serverAuth),
        AuthorityKeyIdentifier, SubjectAlternativeName.

        The AKI carries only the key identifier. It is copied from the issuer's
        SubjectKeyIdentifier when present, otherwise derived from the issuer
        public key.

        Args:
            issuer_certificate: Root CA certificate signing the leaf
            public_key: Leaf public key (no leaf extension is derived from it)
            dns_names: DNS names for the SAN extension, in order

        Returns:
            Extension list in the order they are added to the certificate

        Raises:
            InvalidParameterError: If dns_names is empty, has blank entries
                or holds a name that cannot be IDNA-encoded
        """
        names = validate_dns_names(dns_names)

        try:
            issuer_ski = issuer_certificate.extensions.get_extension_for_class(
                x509.SubjectKeyIdentifier
            ).value
            authority_key_id = x509.AuthorityKeyIdentifier.from_issuer_subject_key_identifier(
                issuer_ski
            )
        except x509.ExtensionNotFound:
            authority_key_id = x509.AuthorityKeyIdentifier.from_issuer_public_key(
                issuer_certificate.public_key()  # type: ignore[arg-type]
            )

        # path length is left unset: cryptography rejects it when ca=False
        return [
            (x509.BasicConstraints(ca=False, path_length=None), False),
            (
                x509.KeyUsage(
                    digital_signature=True,
                    content_commitment=False,
                    key_encipherment=True,
                    data_encipherment=False,
                    key_agreement=False,
                    key_cert_sign=False,
                    crl_sign=False,
                    encipher_only=False,
                    decipher_only=False,
                ),
                True,
            ),
            (x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]), False),
            (authority_key_id, False),
            (x509.SubjectAlternativeName([x509.DNSName(name) for name in names]), False),
        ]
