"""CA manager: obtain the root CA, issue a leaf and export every artifact."""

from collections.abc import Callable
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from pathlib import Path

from .cert_utils import generate_key_pair, get_certificate_serial_hex
from .certificate_builder import CertificateBuilder
from .config import CAConfig, IssuanceOptions
from .errors import InvalidParameterError, IssuanceError
from .exporter import ArtifactExporter
from .extensions import validate_dns_names
from .logging_config import LOGGER
from .models import IssuanceResult, IssuedCertificate, LeafArtifactPaths, RootAuthority
from .root_authority import RootAuthorityManager

ExportTask = Callable[[], Path | None]


class CAManager:
    """Certificate Authority manager for development certificate issuance."""

    def __init__(self, config: CAConfig) -> None:
        """Initialize CA manager with configuration.

        Args:
            config: CA configuration with output directory and root CA policy
        """
        self.config = config
        self.roots = RootAuthorityManager(config)
        self.exporter = ArtifactExporter(config.output_dir)

    def issue_certificate(self, options: IssuanceOptions) -> IssuanceResult:
        """Issue a leaf certificate signed by the root CA of the same algorithm.

        Steps:
            1. Load or mint the root CA for options.algorithm
            2. Generate the leaf key and issue the leaf certificate
            3. Export root (when new), leaf cert/key and optional keystore
               concurrently

        Args:
            options: Validated issuance options

        Returns:
            IssuanceResult with the root, the leaf and the written paths

        Raises:
            InvalidParameterError: If options cannot be issued with
            RootLoadError: If an existing root CA cannot be loaded
            IssuanceError: If the leaf cannot be signed
            ExportError: If any artifact cannot be written
        """
        if not options.certificate_name or not options.certificate_name.strip():
            raise InvalidParameterError("certificate name must not be blank")
        validate_dns_names(options.dns_names)
        subject = options.subject.validate()
        subject.with_common_name(self.config.root_common_name).validate()

        key_pair = generate_key_pair(
            options.algorithm,
            options.strength,
            min_rsa_key_size=self.config.min_rsa_key_size,
        )

        root = self.roots.obtain(options.algorithm, subject)
        if root.issued.algorithm is not options.algorithm:
            raise IssuanceError(
                f"{root.issued.algorithm.name} root CA cannot sign {options.algorithm.name} leaves"
            )

        LOGGER.info("Creating certificate for %s", subject)
        leaf = CertificateBuilder.issue_leaf(
            issuer=root.issued,
            subject=subject,
            key_pair=key_pair,
            hash_algorithm=options.hash_algorithm,
            dns_names=options.dns_names,
            validity_years=self.config.leaf_validity_years,
            backdate_days=self.config.backdate_days,
        )

        self.exporter.ensure_output_dir()
        leaf_paths = self.exporter.resolve_leaf_paths(
            options.certificate_name,
            options.algorithm,
            include_keystore=options.wants_keystore,
        )

        LOGGER.info("Exporting certificate and private key")
        tasks = self._export_tasks(root, leaf_paths, options, leaf)
        written = self._run_exports(tasks)

        return IssuanceResult(
            root=root,
            leaf=leaf,
            leaf_paths=leaf_paths,
            serial_number=get_certificate_serial_hex(leaf.certificate),
            written_paths=written,
        )

    def _export_tasks(
        self,
        root: RootAuthority,
        leaf_paths: LeafArtifactPaths,
        options: IssuanceOptions,
        leaf: IssuedCertificate,
    ) -> list[ExportTask]:
        exporter = self.exporter
        tasks: list[ExportTask] = []

        if root.was_created:
            # a new root replaces the orphan half of an incomplete pair
            issued_root = root.issued
            tasks.append(
                lambda: exporter.export_pem(issued_root.private_key, root.key_path, overwrite=True)
            )
            tasks.append(
                lambda: exporter.export_pem(issued_root.certificate, root.cert_path, overwrite=True)
            )

        tasks.append(lambda: exporter.export_pem(leaf.private_key, leaf_paths.key_path))
        tasks.append(lambda: exporter.export_pem(leaf.certificate, leaf_paths.cert_path))

        if leaf_paths.keystore_path is not None:
            keystore_path = leaf_paths.keystore_path
            tasks.append(
                lambda: exporter.export_keystore(
                    leaf,
                    keystore_path,
                    options.pfx_password,
                    friendly_name=options.certificate_name,
                )
            )
        return tasks

    def _run_exports(self, tasks: list[ExportTask]) -> list[Path]:
        """Run export tasks on a worker pool; the first failure cancels the rest and is raised."""
        with ThreadPoolExecutor(max_workers=max(1, self.config.export_workers)) as pool:
            futures: list[Future[Path | None]] = [pool.submit(task) for task in tasks]
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)

            for future in pending:
                future.cancel()
            for future in futures:
                if future not in done:
                    continue
                error = future.exception()
                if error is not None:
                    raise error

        written: list[Path] = []
        for future in futures:
            path = future.result()
            if path is not None:
                written.append(path)
        return written
