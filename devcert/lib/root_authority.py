"""Root CA bootstrap: load the on-disk root for an algorithm or mint a new one."""

from pathlib import Path

from .cert_utils import (
    deserialize_certificate,
    deserialize_private_key,
    generate_key_pair,
    key_algorithm,
    key_matches_certificate,
)
from .certificate_builder import CertificateBuilder
from .config import Algorithm, CAConfig, DistinguishedName
from .errors import RootLoadError
from .logging_config import LOGGER
from .models import IssuedCertificate, RootAuthority


class RootAuthorityManager:
    """Owns the one-root-CA-per-algorithm invariant under the output directory."""

    def __init__(self, config: CAConfig) -> None:
        """Initialize root manager with configuration.

        Args:
            config: Output directory, root file name stem and root key policy
        """
        self.config = config

    def root_paths(self, algorithm: Algorithm) -> tuple[Path, Path]:
        """Return (cert_path, key_path) of the root CA for an algorithm."""
        stem = f"{self.config.root_name}-{algorithm.value}"
        return (
            self.config.output_dir / f"{stem}-cert.pem",
            self.config.output_dir / f"{stem}-key.pem",
        )

    def obtain(self, algorithm: Algorithm, subject_defaults: DistinguishedName) -> RootAuthority:
        """Load the root CA for an algorithm, or mint one if none is on disk.

        Nothing is written here; a newly minted root comes back with
        was_created=True and is persisted by the caller.

        Args:
            algorithm: Key algorithm family of the root
            subject_defaults: Organization and unit for a new root subject.
                The common name is replaced by the configured root CN.

        Returns:
            RootAuthority with the root certificate and its private key

        Raises:
            RootLoadError: If both root files exist but cannot be loaded
        """
        algorithm = Algorithm.parse(algorithm)
        cert_path, key_path = self.root_paths(algorithm)
        cert_exists = cert_path.exists()
        key_exists = key_path.exists()

        if cert_exists and key_exists:
            LOGGER.info("Root CA exists")
            LOGGER.info("Loading root CA certificate: %s", cert_path)
            issued = self._load(algorithm, cert_path, key_path)
            return RootAuthority(
                issued=issued, cert_path=cert_path, key_path=key_path, was_created=False
            )

        if cert_exists or key_exists:
            present = cert_path if cert_exists else key_path
            LOGGER.warning("Incomplete root CA on disk, regenerating (found only %s)", present)
        else:
            LOGGER.info("Root CA does not exist")

        LOGGER.info("Creating root CA certificate")
        issued = self._mint(algorithm, subject_defaults)
        return RootAuthority(issued=issued, cert_path=cert_path, key_path=key_path, was_created=True)

    def _mint(self, algorithm: Algorithm, subject_defaults: DistinguishedName) -> IssuedCertificate:
        strength = (
            self.config.root_rsa_key_size
            if algorithm is Algorithm.RSA
            else self.config.root_ec_curve
        )
        key_pair = generate_key_pair(algorithm, strength, min_rsa_key_size=0)
        return CertificateBuilder.issue_root(
            subject=subject_defaults.with_common_name(self.config.root_common_name),
            key_pair=key_pair,
            hash_algorithm=self.config.root_hash_algorithm,
            validity_years=self.config.root_validity_years,
            backdate_days=self.config.backdate_days,
        )

    def _load(self, algorithm: Algorithm, cert_path: Path, key_path: Path) -> IssuedCertificate:
        hint = f"remove {cert_path} and {key_path} to generate a new root CA"
        try:
            certificate = deserialize_certificate(cert_path.read_bytes())
            private_key = deserialize_private_key(key_path.read_bytes())
        except (OSError, ValueError, TypeError) as e:
            raise RootLoadError(f"failed to load root CA certificate: {e}; {hint}") from e

        if key_algorithm(private_key) is not algorithm:
            raise RootLoadError(f"root CA key in {key_path} is not an {algorithm.name} key; {hint}")
        if not key_matches_certificate(private_key, certificate):
            raise RootLoadError(f"root CA key does not match root CA certificate; {hint}")

        return IssuedCertificate(certificate=certificate, private_key=private_key, algorithm=algorithm)
