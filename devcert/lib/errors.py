"""Exception types raised by the certificate issuance engine."""


class DevCertError(Exception):
    """Base class for all devcert failures surfaced to the caller."""


class InvalidParameterError(DevCertError, ValueError):
    """Caller supplied a value the engine cannot issue with.

    Examples: RSA key size below the configured floor, unknown curve or hash
    tag, empty DNS name list.
    """


class RootLoadError(DevCertError):
    """Existing root CA files could not be loaded.

    The root is never regenerated over existing files; the operator has to
    remove both files to mint a new one.
    """


class IssuanceError(DevCertError):
    """Certificate could not be signed (issuer key missing or unusable)."""


class ExportError(DevCertError, OSError):
    """An artifact could not be written to disk."""
