"""Issuance configuration and option value objects."""

import getpass
import socket
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509 import oid

from .errors import InvalidParameterError


class Algorithm(str, Enum):
    """Key algorithm family. The value is the tag used in file names."""

    RSA = "rsa"
    EC = "ec"

    @classmethod
    def parse(cls, tag: "str | Algorithm") -> "Algorithm":
        """Return the algorithm for a tag such as 'rsa', 'EC' or 'ecdsa'."""
        if isinstance(tag, Algorithm):
            return tag
        normalized = tag.strip().lower()
        if normalized == "ecdsa":
            normalized = "ec"
        for member in cls:
            if member.value == normalized:
                return member
        raise InvalidParameterError(f"unsupported key algorithm: {tag!r}")


class NamedCurve(str, Enum):
    """NIST curves supported for EC keys."""

    P256 = "P-256"
    P384 = "P-384"
    P521 = "P-521"

    def to_curve(self) -> ec.EllipticCurve:
        """Return the cryptography curve instance for this tag."""
        return _CURVES[self]()

    @classmethod
    def parse(cls, tag: "str | NamedCurve") -> "NamedCurve":
        """Return the curve for a tag such as 'P-384', 'nistP384' or 'secp384r1'.

        Raises:
            InvalidParameterError: If the tag names no supported curve
        """
        if isinstance(tag, NamedCurve):
            return tag
        normalized = tag.strip().lower().replace("-", "").replace("_", "")
        for member in cls:
            bits = member.value[2:]
            if normalized in {f"p{bits}", f"nistp{bits}", f"secp{bits}r1"}:
                return member
        raise InvalidParameterError(f"unsupported named curve: {tag!r}")


_CURVES: dict[NamedCurve, type[ec.EllipticCurve]] = {
    NamedCurve.P256: ec.SECP256R1,
    NamedCurve.P384: ec.SECP384R1,
    NamedCurve.P521: ec.SECP521R1,
}


class HashAlgorithm(str, Enum):
    """Signature hash algorithms accepted for issued certificates."""

    SHA256 = "SHA-256"
    SHA384 = "SHA-384"
    SHA512 = "SHA-512"

    def to_hash(self) -> hashes.HashAlgorithm:
        """Return the cryptography hash instance for this tag."""
        return _HASHES[self]()

    @classmethod
    def parse(cls, tag: "str | HashAlgorithm") -> "HashAlgorithm":
        """Return the hash for a tag such as 'SHA256', 'sha-384' or 'SHA-512'."""
        if isinstance(tag, HashAlgorithm):
            return tag
        normalized = tag.strip().upper().replace("-", "").replace("_", "")
        for member in cls:
            if member.value.replace("-", "") == normalized:
                return member
        raise InvalidParameterError(f"unsupported hash algorithm: {tag!r}")


MAX_NAME_ATTRIBUTE_LENGTH = 64

_HASHES: dict[HashAlgorithm, type[hashes.HashAlgorithm]] = {
    HashAlgorithm.SHA256: hashes.SHA256,
    HashAlgorithm.SHA384: hashes.SHA384,
    HashAlgorithm.SHA512: hashes.SHA512,
}


def default_organizational_unit() -> str:
    """Return 'user@host' for the current process, used as the default OU."""
    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        user = "developer"
    return f"{user}@{socket.gethostname()}"[:MAX_NAME_ATTRIBUTE_LENGTH]


@dataclass
class CAConfig:
    """Engine configuration: output location, root CA identity and key policy."""

    output_dir: Path = Path("output")
    root_name: str = "root-ca"
    root_common_name: str = "DevCert Development Root CA"
    root_validity_years: int = 10
    leaf_validity_years: int = 3
    backdate_days: int = 1
    root_rsa_key_size: int = 4096
    root_ec_curve: NamedCurve = NamedCurve.P521
    root_hash_algorithm: HashAlgorithm = HashAlgorithm.SHA512
    min_rsa_key_size: int = 2048
    export_workers: int = 4


@dataclass(frozen=True)
class DistinguishedName:
    """X.509 Subject Distinguished Name (O, OU, CN)."""

    organization: str
    organizational_unit: str
    common_name: str

    def __str__(self) -> str:
        return (
            f"O={self.organization}, OU={self.organizational_unit}, CN={self.common_name}"
        )

    def validate(self) -> "DistinguishedName":
        """Check every attribute is non-blank and at most 64 characters.

        Raises:
            InvalidParameterError: If an attribute cannot be encoded in a certificate
        """
        attributes = {
            "organization": self.organization,
            "organizational unit": self.organizational_unit,
            "common name": self.common_name,
        }
        for label, value in attributes.items():
            if not value or not value.strip():
                raise InvalidParameterError(f"subject {label} must not be blank")
            if len(value) > MAX_NAME_ATTRIBUTE_LENGTH:
                raise InvalidParameterError(
                    f"subject {label} is longer than {MAX_NAME_ATTRIBUTE_LENGTH} characters: {value!r}"
                )
        return self

    def to_x509_name(self) -> x509.Name:
        """Convert to cryptography x509.Name for certificate generation."""
        return x509.Name(
            [
                x509.NameAttribute(oid.NameOID.ORGANIZATION_NAME, self.organization),
                x509.NameAttribute(oid.NameOID.ORGANIZATIONAL_UNIT_NAME, self.organizational_unit),
                x509.NameAttribute(oid.NameOID.COMMON_NAME, self.common_name),
            ]
        )

    def with_common_name(self, common_name: str) -> "DistinguishedName":
        """Return a copy with the same O and OU and a different CN."""
        return DistinguishedName(
            organization=self.organization,
            organizational_unit=self.organizational_unit,
            common_name=common_name,
        )


@dataclass(frozen=True)
class IssuanceOptions:
    """Validated options for one leaf certificate issuance.

    Built once by the command-line layer and passed by value into the engine.
    """

    certificate_name: str
    algorithm: Algorithm = Algorithm.RSA
    key_size: int = 2048
    curve: NamedCurve = NamedCurve.P256
    hash_algorithm: HashAlgorithm = HashAlgorithm.SHA256
    dns_names: tuple[str, ...] = ("localhost",)
    pfx_password: str | None = None
    organization_name: str = "DevCert Solutions"
    organization_unit_name: str = field(default_factory=default_organizational_unit)
    common_name: str = "DevCert Development"

    @property
    def subject(self) -> DistinguishedName:
        """Return the leaf subject built from the organization fields."""
        return DistinguishedName(
            organization=self.organization_name,
            organizational_unit=self.organization_unit_name,
            common_name=self.common_name,
        )

    @property
    def strength(self) -> int | NamedCurve:
        """Return the key strength parameter for the selected algorithm."""
        if self.algorithm is Algorithm.RSA:
            return self.key_size
        return self.curve

    @property
    def wants_keystore(self) -> bool:
        """True when a non-blank keystore password was supplied."""
        return bool(self.pfx_password and self.pfx_password.strip())
