"""wipecert - signed certificates for data wipe reports.

Accepts wipe-report PDFs, issues RSA-signed certificates with a QR code
pointing at a public verification page, and lets anyone re-verify a
certificate later from the stored record and the issuer's public key.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
