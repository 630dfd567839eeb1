"""Certificate utility functions for key generation, serialization and validity dates."""

import secrets
from datetime import datetime

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.asymmetric.ec import EllipticCurvePrivateKey
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from .config import Algorithm, NamedCurve
from .errors import InvalidParameterError
from .models import KeyPair, PrivateKey, PublicKey

SERIAL_NUMBER_BYTES = 8
DEFAULT_RSA_KEY_SIZE = 2048
MIN_RSA_KEY_SIZE = 2048


def generate_key_pair(
    algorithm: Algorithm | str,
    strength: int | NamedCurve | str | None = None,
    min_rsa_key_size: int = MIN_RSA_KEY_SIZE,
) -> KeyPair:
    """Generate a key pair for the requested algorithm and strength.

    Args:
        algorithm: RSA or EC
        strength: RSA modulus bit length, or EC named curve tag.
            None selects the default (2048 bits / P-256).
        min_rsa_key_size: Smallest RSA modulus accepted

    Returns:
        KeyPair holding the new private key

    Raises:
        InvalidParameterError: If the RSA size is below the floor or the
            curve tag is not recognized
    """
    algorithm = Algorithm.parse(algorithm)

    if algorithm is Algorithm.RSA:
        key_size = DEFAULT_RSA_KEY_SIZE if strength is None else strength
        if not isinstance(key_size, int) or isinstance(key_size, bool):
            raise InvalidParameterError(f"RSA key size must be an integer, got {key_size!r}")
        if key_size < min_rsa_key_size:
            raise InvalidParameterError(
                f"RSA key size {key_size} is below the minimum of {min_rsa_key_size} bits"
            )
        private_key: PrivateKey = rsa.generate_private_key(
            public_exponent=65537,
            key_size=key_size,
        )
        return KeyPair(algorithm=algorithm, strength=key_size, private_key=private_key)

    if isinstance(strength, int):
        raise InvalidParameterError(f"EC keys take a named curve, got {strength!r}")
    curve = NamedCurve.P256 if strength is None else NamedCurve.parse(strength)
    private_key = ec.generate_private_key(curve.to_curve())
    return KeyPair(algorithm=algorithm, strength=curve, private_key=private_key)


def key_algorithm(key: PrivateKey | PublicKey) -> Algorithm:
    """Return the algorithm family of a private or public key."""
    if isinstance(key, (rsa.RSAPrivateKey, rsa.RSAPublicKey)):
        return Algorithm.RSA
    if isinstance(key, (ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey)):
        return Algorithm.EC
    raise InvalidParameterError(f"unsupported key type: {type(key).__name__}")


def public_key_bytes(key: PublicKey) -> bytes:
    """Return the DER SubjectPublicKeyInfo encoding of a public key."""
    return key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def key_matches_certificate(key: PrivateKey, cert: x509.Certificate) -> bool:
    """True if the private key belongs to the certificate's public key."""
    return public_key_bytes(key.public_key()) == public_key_bytes(cert.public_key())  # type: ignore[arg-type]


def serialize_private_key(key: PrivateKey) -> bytes:
    """Serialize private key to PEM (PKCS#1 for RSA, SEC1 for EC, no encryption)."""
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )


def deserialize_private_key(pem_data: bytes) -> PrivateKey:
    """Deserialize an RSA or EC private key from PEM bytes."""
    key = serialization.load_pem_private_key(pem_data, password=None)
    if not isinstance(key, (RSAPrivateKey, EllipticCurvePrivateKey)):
        raise ValueError("expected RSA or EC private key")
    return key


def serialize_certificate(cert: x509.Certificate) -> bytes:
    """Serialize certificate to PEM format."""
    return cert.public_bytes(serialization.Encoding.PEM)


def deserialize_certificate(pem_data: bytes) -> x509.Certificate:
    """Deserialize certificate from PEM bytes."""
    return x509.load_pem_x509_certificate(pem_data)


def generate_serial_number() -> int:
    """Generate a positive serial number from 8 random bytes."""
    serial = int.from_bytes(secrets.token_bytes(SERIAL_NUMBER_BYTES), "big")
    if serial == 0:
        return generate_serial_number()
    return serial


def get_certificate_serial_hex(cert: x509.Certificate) -> str:
    """Return certificate serial number as hex with colons (e.g., 3A:F2:B1:...)."""
    serial_hex = f"{cert.serial_number:X}"
    if len(serial_hex) % 2 != 0:
        serial_hex = "0" + serial_hex
    return ":".join(serial_hex[i : i + 2] for i in range(0, len(serial_hex), 2))


def add_years(moment: datetime, years: int) -> datetime:
    """Add calendar years, moving 29 February to 28 February when needed."""
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        return moment.replace(year=moment.year + years, day=28)
