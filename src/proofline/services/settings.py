"""Settings dataclass plus JSON persistence with encrypted secrets."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Callable, Dict, Mapping

from cryptography.fernet import Fernet, InvalidToken

from ..extraction.extractor import ExtractionConfig

__all__ = [
    "SecretVault",
    "Settings",
    "SettingsStore",
    "redact_secret",
]

LOGGER = logging.getLogger(__name__)
_SETTINGS_DIR = Path.home() / ".proofline"
_DEFAULT_SETTINGS_PATH = _SETTINGS_DIR / "settings.json"
_SETTINGS_VERSION = 1
_SECRET_FIELDS: tuple[str, ...] = ("languagetool_api_key", "ai_api_key")
_CIPHERTEXT_SUFFIX = "_ciphertext"
_KEY_ENV = "PROOFLINE_SECRET_KEY"
_TRUE_VALUES = frozenset({"1", "true", "yes", "on", "debug"})


def _parse_bool(raw: str) -> bool:
    return raw.strip().lower() in _TRUE_VALUES


def _parse_list(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


def _parse_int(raw: str) -> int:
    return int(raw.strip(), 10)


# env var -> (Settings field, converter)
_ENV_OVERRIDES: Mapping[str, tuple[str, Callable[[str], Any]]] = {
    "PROOFLINE_LANGUAGE": ("language", str),
    "PROOFLINE_CONTENT_FIELD": ("content_field", str),
    "PROOFLINE_LANGUAGETOOL_URL": ("languagetool_url", str),
    "PROOFLINE_LANGUAGETOOL_USERNAME": ("languagetool_username", str),
    "PROOFLINE_LANGUAGETOOL_API_KEY": ("languagetool_api_key", str),
    "PROOFLINE_AI_BASE_URL": ("ai_base_url", str),
    "PROOFLINE_AI_API_KEY": ("ai_api_key", str),
    "PROOFLINE_AI_MODEL": ("ai_model", str),
    "PROOFLINE_SKIP_RULES": ("skip_rules", _parse_list),
    "PROOFLINE_SKIP_CATEGORIES": ("skip_categories", _parse_list),
    "PROOFLINE_ENABLE_AI_FALLBACK": ("enable_ai_fallback", _parse_bool),
    "PROOFLINE_DEBUG_LOGGING": ("debug_logging", _parse_bool),
    "PROOFLINE_MAX_TEXT_LENGTH": ("max_text_length", _parse_int),
    "PROOFLINE_MAX_RETRIES": ("max_retries", _parse_int),
    "PROOFLINE_REQUEST_TIMEOUT": ("request_timeout", float),
    "PROOFLINE_BATCH_DELAY": ("batch_delay", float),
    "PROOFLINE_BATCH_STALE_AFTER": ("batch_stale_after", float),
    "PROOFLINE_DICTIONARY_TTL": ("dictionary_ttl", float),
}


@dataclass(slots=True)
class Settings:
    """Configuration shared by extraction, checking, fixing and batch scans."""

    language: str = "fr"
    content_field: str = "content"
    hero_field: str = "hero"
    hero_key: str = "richText"
    blocks_field: str = "layout"
    languagetool_url: str = "https://api.languagetool.org/v2/check"
    languagetool_username: str | None = None
    languagetool_api_key: str = ""
    request_timeout: float = 30.0
    max_retries: int = 3
    retry_min_seconds: float = 0.5
    retry_max_seconds: float = 6.0
    max_text_length: int = 18_000
    skip_rules: list[str] = field(default_factory=list)
    skip_categories: list[str] = field(default_factory=list)
    custom_dictionary: list[str] = field(default_factory=list)
    warning_threshold: int = 80
    enable_ai_fallback: bool = False
    ai_base_url: str = "https://api.openai.com/v1"
    ai_api_key: str = ""
    ai_model: str = "gpt-4o-mini"
    ai_max_text_length: int = 8_000
    dictionary_ttl: float = 300.0
    batch_delay: float = 3.0
    batch_stale_after: float = 300.0
    debug_logging: bool = False

    def extraction_config(self) -> ExtractionConfig:
        return ExtractionConfig(
            hero_field=self.hero_field,
            hero_key=self.hero_key,
            blocks_field=self.blocks_field,
        )


class SecretVault:
    """Fernet encryption for API keys stored in the settings file.

    The key comes from ``PROOFLINE_SECRET_KEY`` when set (server deployments)
    and otherwise from ``key_path``, which is created on first use.
    """

    prefix = "fernet"

    def __init__(self, *, key_path: Path | None = None) -> None:
        self._key_path = key_path or (_SETTINGS_DIR / "settings.key")
        self._fernet: Fernet | None = None

    @property
    def key_path(self) -> Path:
        return self._key_path

    def encrypt(self, secret: str) -> str:
        if not secret:
            return ""
        token = self._cipher().encrypt(secret.encode("utf-8")).decode("ascii")
        return f"{self.prefix}:{token}"

    def decrypt(self, token: str | None) -> str:
        """Return the plaintext for ``token``; raises ``ValueError`` when it cannot."""

        if not token:
            return ""
        prefix, _, body = token.partition(":")
        if prefix != self.prefix or not body:
            raise ValueError(f"Unknown secret token prefix {prefix!r}")
        try:
            plaintext = self._cipher().decrypt(body.encode("ascii"))
        except InvalidToken as exc:
            raise ValueError("Secret token does not match the current key") from exc
        return plaintext.decode("utf-8")

    def _cipher(self) -> Fernet:
        if self._fernet is None:
            env_key = os.environ.get(_KEY_ENV, "").strip()
            self._fernet = Fernet(env_key.encode("ascii") if env_key else self._read_key_file())
        return self._fernet

    def _read_key_file(self) -> bytes:
        path = self._key_path
        if path.exists():
            return path.read_bytes().strip()
        path.parent.mkdir(parents=True, exist_ok=True)
        key = Fernet.generate_key()
        staging = path.with_suffix(".tmp")
        staging.write_bytes(key)
        if os.name != "nt":  # pragma: no cover - depends on OS
            os.chmod(staging, 0o600)
        staging.replace(path)
        LOGGER.info("Created settings key at %s", path)
        return key


class SettingsStore:
    """Reads and writes :class:`Settings` as JSON next to a vault key."""

    def __init__(self, path: Path | None = None, *, vault: SecretVault | None = None) -> None:
        self._path = path or _DEFAULT_SETTINGS_PATH
        self._vault = vault or SecretVault(key_path=self._path.with_suffix(".key"))

    @property
    def path(self) -> Path:
        return self._path

    @property
    def vault(self) -> SecretVault:
        return self._vault

    def load(self, *, overrides: Mapping[str, Any] | None = None) -> Settings:
        """Return stored settings with runtime ``overrides`` then ``PROOFLINE_*`` variables applied."""

        settings = self._from_payload(self._read_payload())
        if overrides:
            settings = _merge(settings, overrides, source="runtime")
        return _merge(settings, _environment_overrides(), source="environment")

    def save(self, settings: Settings) -> Path:
        payload = asdict(settings)
        for name in _SECRET_FIELDS:
            plaintext = payload.pop(name, "") or ""
            if plaintext:
                payload[name + _CIPHERTEXT_SUFFIX] = self._vault.encrypt(plaintext)
        payload["version"] = _SETTINGS_VERSION

        self._path.parent.mkdir(parents=True, exist_ok=True)
        staging = self._path.with_suffix(".tmp")
        staging.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        staging.replace(self._path)
        LOGGER.debug("Settings saved to %s", self._path)
        return self._path

    def _from_payload(self, payload: Mapping[str, Any]) -> Settings:
        if not payload:
            return Settings()
        if payload.get("version") not in (None, _SETTINGS_VERSION):
            LOGGER.debug("Settings version %s differs from %s", payload.get("version"), _SETTINGS_VERSION)
        allowed = {item.name for item in fields(Settings)} - set(_SECRET_FIELDS)
        try:
            settings = Settings(**{key: value for key, value in payload.items() if key in allowed})
        except TypeError as exc:
            LOGGER.warning("Ignoring malformed settings payload: %s", exc)
            settings = Settings()
        secrets = self._read_secrets(payload)
        return replace(settings, **secrets) if secrets else settings

    def _read_secrets(self, payload: Mapping[str, Any]) -> Dict[str, str]:
        secrets: Dict[str, str] = {}
        for name in _SECRET_FIELDS:
            token = payload.get(name + _CIPHERTEXT_SUFFIX)
            if not token:
                if payload.get(name):
                    # stored before encryption existed; the next save encrypts it
                    secrets[name] = str(payload[name])
                continue
            try:
                secrets[name] = self._vault.decrypt(token)
            except ValueError as exc:
                LOGGER.warning("Dropping %s: %s", name, exc)
        return secrets

    def _read_payload(self) -> Dict[str, Any]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            LOGGER.warning("Settings file %s is not valid JSON: %s", self._path, exc)
            return {}
        if not isinstance(data, dict):
            LOGGER.warning("Settings file %s does not contain an object", self._path)
            return {}
        return data


def _environment_overrides() -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for env_name, (field_name, convert) in _ENV_OVERRIDES.items():
        raw = os.environ.get(env_name)
        if raw is None:
            continue
        try:
            values[field_name] = convert(raw)
        except ValueError:
            LOGGER.warning("Ignoring %s=%r: expected %s", env_name, raw, getattr(convert, "__name__", "value"))
    return values


def _merge(settings: Settings, overrides: Mapping[str, Any], *, source: str) -> Settings:
    allowed = {item.name for item in fields(Settings)}
    accepted = {key: value for key, value in overrides.items() if key in allowed and value is not None}
    if not accepted:
        return settings
    LOGGER.debug("Applying %s settings overrides: %s", source, sorted(accepted))
    return replace(settings, **accepted)


def redact_secret(value: str | None) -> str:
    """Mask a secret for logs, keeping at most its last four characters."""

    stripped = (value or "").strip()
    if len(stripped) <= 8:
        return "*" * len(stripped)
    return "****" + stripped[-4:]
