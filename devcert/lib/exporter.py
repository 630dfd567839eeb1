"""Artifact export: PEM certificates and keys, PKCS#12 keystores, collision-free paths."""

import os
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.serialization import pkcs12

from .cert_utils import serialize_certificate, serialize_private_key
from .config import Algorithm
from .errors import ExportError
from .logging_config import LOGGER
from .models import IssuedCertificate, LeafArtifactPaths, PrivateKey

PRIVATE_FILE_MODE = 0o600
PUBLIC_FILE_MODE = 0o644


def resolve_non_colliding_path(base_dir: Path, file_name: str) -> Path:
    """Return base_dir/file_name, or the first free name-N variant of it.

    The counter goes before the final extension: cert.pem, cert-1.pem,
    cert-2.pem, ... A name without an extension gets the counter appended.

    This is the single-file API. Leaf artifact sets are resolved together by
    ArtifactExporter.resolve_leaf_paths so that they keep one shared label.
    """
    candidate = base_dir / file_name
    stem, dot, suffix = file_name.rpartition(".")
    if not dot or not stem:
        stem, suffix = file_name, ""

    counter = 1
    while candidate.exists():
        numbered = f"{stem}-{counter}.{suffix}" if suffix else f"{stem}-{counter}"
        candidate = base_dir / numbered
        counter += 1
    return candidate


class ArtifactExporter:
    """Writes issued certificates, keys and keystores under one output directory."""

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir

    def ensure_output_dir(self) -> Path:
        """Create the output directory if it does not exist."""
        if not self.output_dir.is_dir():
            LOGGER.info("Creating output folder %s", self.output_dir)
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExportError(f"cannot create output directory {self.output_dir}: {e}") from e
        return self.output_dir

    def resolve_leaf_paths(
        self,
        certificate_name: str,
        algorithm: Algorithm,
        include_keystore: bool = False,
    ) -> LeafArtifactPaths:
        """Pick one free label for a leaf's certificate, key and keystore.

        Tries certificate_name, then certificate_name-1, certificate_name-2, ...
        until no file of the set exists, so the certificate and key of one run
        always share a label (svc-ec-cert.pem / svc-ec-key.pem, then
        svc-1-ec-cert.pem / svc-1-ec-key.pem).
        """
        counter = 0
        while True:
            label = certificate_name if counter == 0 else f"{certificate_name}-{counter}"
            stem = f"{label}-{algorithm.value}"
            paths = LeafArtifactPaths(
                label=label,
                cert_path=self.output_dir / f"{stem}-cert.pem",
                key_path=self.output_dir / f"{stem}-key.pem",
                keystore_path=self.output_dir / f"{stem}-cert.pfx" if include_keystore else None,
            )
            candidates = [paths.cert_path, paths.key_path, paths.keystore_path]
            if not any(path is not None and path.exists() for path in candidates):
                return paths
            counter += 1

    def export_pem(
        self,
        item: x509.Certificate | PrivateKey,
        target_path: Path,
        overwrite: bool = False,
    ) -> Path:
        """Write a certificate or private key to target_path as PEM.

        Private keys use the algorithm-specific encoding (PKCS#1 for RSA,
        SEC1 for EC) without encryption and are written with mode 0600. An
        existing file is only replaced when overwrite is set.

        Raises:
            ExportError: If the file exists or cannot be written
        """
        if isinstance(item, x509.Certificate):
            data, kind, private = serialize_certificate(item), "Certificate", False
        else:
            data, kind, private = serialize_private_key(item), "Private key", True

        self._write(target_path, data, private=private, overwrite=overwrite)
        LOGGER.info("%s exported to %s", kind, target_path)
        return target_path

    def export_keystore(
        self,
        issued: IssuedCertificate,
        target_path: Path,
        password: str | None,
        friendly_name: str | None = None,
    ) -> Path | None:
        """Write a password-protected PKCS#12 bundle of the certificate and its key.

        Skipped, returning None, when password is None or blank.

        Raises:
            ExportError: If the bundle cannot be serialized or written
        """
        if password is None or not password.strip():
            LOGGER.info("No keystore password given, skipping PFX export")
            return None

        name = (friendly_name or target_path.stem).encode("utf-8")
        try:
            data = pkcs12.serialize_key_and_certificates(
                name=name,
                key=issued.private_key,
                cert=issued.certificate,
                cas=None,
                encryption_algorithm=serialization.BestAvailableEncryption(
                    password.encode("utf-8")
                ),
            )
        except (TypeError, ValueError) as e:
            raise ExportError(f"cannot build keystore for {target_path}: {e}") from e

        self._write(target_path, data, private=True)
        LOGGER.info("Certificate exported to %s", target_path)
        return target_path

    @staticmethod
    def _write(target_path: Path, data: bytes, private: bool = False, overwrite: bool = False) -> None:
        """Write data to target_path, refusing to replace an existing file unless overwrite is set.

        Files holding a private key are created readable by the owner only.
        """
        flags = os.O_WRONLY | os.O_CREAT | (os.O_TRUNC if overwrite else os.O_EXCL)
        mode = PRIVATE_FILE_MODE if private else PUBLIC_FILE_MODE
        try:
            fd = os.open(target_path, flags, mode)
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            if private:
                # O_CREAT ignores mode when an existing file is truncated
                os.chmod(target_path, PRIVATE_FILE_MODE)
        except FileExistsError as e:
            raise ExportError(f"refusing to overwrite existing file {target_path}") from e
        except OSError as e:
            raise ExportError(f"failed to write {target_path}: {e}") from e
