"""X.509 certification path building, DER reading and certificate checks."""

__version__ = "0.1.0"

__all__ = ["certificate", "checks", "der", "eku", "errors", "path", "x509"]