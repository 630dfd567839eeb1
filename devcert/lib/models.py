"""Key, certificate and result models for issuance operations."""

from dataclasses import dataclass, field
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.ec import EllipticCurvePrivateKey, EllipticCurvePublicKey
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from .config import Algorithm, NamedCurve

PrivateKey = RSAPrivateKey | EllipticCurvePrivateKey
PublicKey = RSAPublicKey | EllipticCurvePublicKey


@dataclass(frozen=True)
class KeyPair:
    """Asymmetric key pair with the algorithm and strength it was generated for."""

    algorithm: Algorithm
    strength: int | NamedCurve
    private_key: PrivateKey

    @property
    def public_key(self) -> PublicKey:
        return self.private_key.public_key()


@dataclass(frozen=True)
class IssuedCertificate:
    """Certificate bound to the private key of its own subject."""

    certificate: x509.Certificate
    private_key: PrivateKey
    algorithm: Algorithm


@dataclass
class RootAuthority:
    """Root CA loaded from or destined for the on-disk PEM pair.

    was_created is True when the root was minted in this invocation and still
    has to be exported.
    """

    issued: IssuedCertificate
    cert_path: Path
    key_path: Path
    was_created: bool


@dataclass
class LeafArtifactPaths:
    """Collision-free output paths for one leaf artifact set."""

    label: str
    cert_path: Path
    key_path: Path
    keystore_path: Path | None = None


@dataclass
class IssuanceResult:
    """Result from leaf certificate issuance.

    Contains the root used for signing, the issued leaf, its serial number and
    every file written by the invocation.
    """

    root: RootAuthority
    leaf: IssuedCertificate
    leaf_paths: LeafArtifactPaths
    serial_number: str
    written_paths: list[Path] = field(default_factory=list)
