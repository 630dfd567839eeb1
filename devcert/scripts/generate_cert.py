#!/usr/bin/env python3
"""Generate a development TLS certificate signed by a local root CA."""

import argparse
import sys
from pathlib import Path

from devcert.lib.ca_manager import CAManager
from devcert.lib.config import (
    Algorithm,
    CAConfig,
    HashAlgorithm,
    IssuanceOptions,
    NamedCurve,
    default_organizational_unit,
)
from devcert.lib.errors import DevCertError
from devcert.lib.logging_config import LOGGER


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser with 'rsa' and 'ec' subcommands."""
    parser = argparse.ArgumentParser(description="DevCert Development Certificate Generator")
    parser.add_argument(
        "--name",
        "-n",
        required=True,
        help="Certificate name; output files are {name}-{rsa|ec}-key.pem, "
        "{name}-{rsa|ec}-cert.pem and {name}-{rsa|ec}-cert.pfx",
    )
    parser.add_argument(
        "--algorithm",
        "-a",
        type=HashAlgorithm.parse,
        default=HashAlgorithm.SHA256,
        help="Hash algorithm: SHA256, SHA384 or SHA512 (default: SHA256)",
    )
    parser.add_argument(
        "--dns-names",
        "-d",
        nargs="+",
        default=["localhost"],
        help="DNS names for the certificate (default: localhost)",
    )
    parser.add_argument(
        "--pfx-password",
        "-p",
        default=None,
        help="Password for PFX export; PFX export is skipped when not provided",
    )
    parser.add_argument(
        "--organization-name",
        "-o",
        default="DevCert Solutions",
        help="Organization name (default: DevCert Solutions)",
    )
    parser.add_argument(
        "--organization-unit-name",
        "-ou",
        default=None,
        help="Organization unit name (default: user@host)",
    )
    parser.add_argument(
        "--common-name",
        "-cn",
        default="DevCert Development",
        help="Common name (default: DevCert Development)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("output"),
        help="Output directory for certificates and keys (default: output)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    rsa_parser = subparsers.add_parser("rsa", help="Generate certificate with RSA key pair")
    rsa_parser.add_argument(
        "--key-size",
        "-s",
        type=int,
        default=2048,
        help="RSA key size in bits (default: 2048)",
    )

    ec_parser = subparsers.add_parser("ec", help="Generate certificate with EC key pair")
    ec_parser.add_argument(
        "--curve",
        "-c",
        type=NamedCurve.parse,
        default=NamedCurve.P256,
        help="Named curve: P-256, P-384 or P-521 (default: P-256)",
    )

    return parser


def options_from_args(args: argparse.Namespace) -> IssuanceOptions:
    """Build immutable issuance options from parsed arguments."""
    algorithm = Algorithm.parse(args.command)
    return IssuanceOptions(
        certificate_name=args.name,
        algorithm=algorithm,
        key_size=getattr(args, "key_size", 2048),
        curve=getattr(args, "curve", NamedCurve.P256),
        hash_algorithm=args.algorithm,
        dns_names=tuple(args.dns_names),
        pfx_password=args.pfx_password,
        organization_name=args.organization_name,
        organization_unit_name=args.organization_unit_name or default_organizational_unit(),
        common_name=args.common_name,
    )


def main() -> int:
    """Issue a leaf certificate, creating the root CA on first use.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    args = build_parser().parse_args()

    try:
        options = options_from_args(args)
        ca_manager = CAManager(CAConfig(output_dir=args.output_dir))

        result = ca_manager.issue_certificate(options)

        LOGGER.info("Certificate created:")
        LOGGER.info("  Key: %s", result.leaf_paths.key_path)
        LOGGER.info("  Cert: %s", result.leaf_paths.cert_path)
        if result.leaf_paths.keystore_path is not None:
            LOGGER.info("  PFX: %s", result.leaf_paths.keystore_path)
        LOGGER.info("  Serial: %s", result.serial_number)

        if result.root.was_created:
            LOGGER.info("Root CA created: %s", result.root.cert_path)
            LOGGER.info(
                "Next: add %s to your system and browser trust stores",
                result.root.cert_path,
            )
        return 0

    except DevCertError as e:
        LOGGER.error("Certificate generation failed: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
