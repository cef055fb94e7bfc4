from .client import GmailProvider, build_provider

__all__ = ["GmailProvider", "build_provider"]
