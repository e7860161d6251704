"""Media Vault CLI - protect and unprotect media attachments."""

__version__ = "1.0.0"
