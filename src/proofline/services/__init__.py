"""Service layer helpers (settings, document persistence)."""

from .documents import DocumentNotFoundError, DocumentStore, InMemoryDocumentStore
from .settings import SecretVault, Settings, SettingsStore, redact_secret

__all__ = [
    "DocumentNotFoundError",
    "DocumentStore",
    "InMemoryDocumentStore",
    "SecretVault",
    "Settings",
    "SettingsStore",
    "redact_secret",
]
