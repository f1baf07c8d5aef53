from .logging import CredentialFilter, setup_logging

__all__ = ["CredentialFilter", "setup_logging"]
