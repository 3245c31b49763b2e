"""Preference dataclasses and persistence helpers."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping

from cryptography.fernet import Fernet, InvalidToken

__all__ = [
    "DEFAULT_COMMAND_PROMPTS",
    "DEFAULT_MODEL",
    "DEFAULT_MODEL_SENTINEL",
    "Preferences",
    "PreferencesStore",
    "SecretVault",
    "redact_secret",
]

LOGGER = logging.getLogger(__name__)
_SETTINGS_DIR = Path.home() / ".quickprompt"
_DEFAULT_PREFERENCES_PATH = _SETTINGS_DIR / "preferences.json"
_PREFERENCES_VERSION = 1
_API_KEY_FIELD = "api_key_ciphertext"
_ENV_OVERRIDES: Mapping[str, str] = {
    "QUICKPROMPT_API_KEY": "api_key",
    "QUICKPROMPT_BASE_URL": "base_url",
    "QUICKPROMPT_MODEL": "model",
    "QUICKPROMPT_CUSTOM_MODEL": "custom_model",
    "QUICKPROMPT_DEFAULT_TARGET_LANGUAGE": "default_target_language",
    "QUICKPROMPT_SECOND_TARGET_LANGUAGE": "second_target_language",
}
_BOOL_ENV_OVERRIDES: Mapping[str, str] = {
    "QUICKPROMPT_SHOW_DIFF": "show_diff",
    "QUICKPROMPT_DISABLE_THINKING": "disable_thinking",
    "QUICKPROMPT_DEBUG_LOGGING": "debug_logging",
}
_FLOAT_ENV_OVERRIDES: Mapping[str, str] = {
    "QUICKPROMPT_REQUEST_TIMEOUT": "request_timeout",
}
_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}

DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_MODEL_SENTINEL = "default"
DEFAULT_COMMAND_PROMPTS: Mapping[str, str] = {
    "askAboutSelectedText": "",
    "comment": (
        "Add concise comments to the following code. Return only the commented code, "
        "without explanations or Markdown fences."
    ),
    "explain": "Explain the following text in simple terms.",
    "translate": "Return only the translation, without explanations.",
}


@dataclass(slots=True, frozen=True)
class Preferences:
    """User preferences, read once and passed explicitly into the core."""

    api_key: str = ""
    base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    model: str = DEFAULT_MODEL
    custom_model: str = ""
    show_diff: bool = False
    disable_thinking: bool = False
    default_target_language: str = "English"
    second_target_language: str = "Chinese"
    request_timeout: float | None = None
    history_limit: int = 100
    debug_logging: bool = False
    command_models: dict[str, str] = field(default_factory=dict)
    command_prompts: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_COMMAND_PROMPTS))

    def prompt_for(self, command: str) -> str:
        return self.command_prompts.get(command, DEFAULT_COMMAND_PROMPTS.get(command, ""))

    def model_for(self, command: str) -> str:
        """Per-command model choice; the sentinel defers to the global models."""

        return self.command_models.get(command) or DEFAULT_MODEL_SENTINEL


class SecretVault:
    """Encrypts the API key with a Fernet key stored next to the preferences."""

    name = "fernet"

    def __init__(self, *, key_path: Path | None = None) -> None:
        self._key_path = key_path or (_SETTINGS_DIR / "preferences.key")
        self._fernet: Fernet | None = None

    @property
    def key_path(self) -> Path:
        return self._key_path

    def encrypt(self, secret: str) -> str:
        if not secret:
            return ""
        token = self._get_fernet().encrypt(secret.encode("utf-8"))
        return f"{self.name}:{token.decode('ascii')}"

    def decrypt(self, token: str | None) -> str:
        if not token:
            return ""
        prefix, payload = self._split_token(token)
        if prefix not in (None, self.name):
            LOGGER.warning("Unknown secret token prefix %s; returning ciphertext.", prefix)
            return token
        try:
            raw = self._get_fernet().decrypt(payload.encode("ascii"))
        except InvalidToken as exc:
            raise ValueError("Invalid Fernet token") from exc
        return raw.decode("utf-8")

    def _get_fernet(self) -> Fernet:
        if self._fernet is None:
            self._fernet = Fernet(self._load_or_create_key())
        return self._fernet

    def _load_or_create_key(self) -> bytes:
        path = self._key_path
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.exists():
            return path.read_bytes().strip()
        key = Fernet.generate_key()
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_bytes(key)
        if os.name != "nt":  # pragma: no cover - depends on OS
            os.chmod(tmp_path, 0o600)
        tmp_path.replace(path)
        return key

    @staticmethod
    def _split_token(token: str) -> tuple[str | None, str]:
        if ":" not in token:
            return None, token
        prefix, payload = token.split(":", 1)
        return (prefix or None), payload


class PreferencesStore:
    """Persistence adapter for :class:`Preferences`."""

    def __init__(self, path: Path | None = None, *, vault: SecretVault | None = None) -> None:
        self._path = path or _DEFAULT_PREFERENCES_PATH
        self._vault = vault or SecretVault(key_path=self._path.with_suffix(".key"))

    @property
    def path(self) -> Path:
        return self._path

    @property
    def vault(self) -> SecretVault:
        return self._vault

    def load(self, *, overrides: Mapping[str, Any] | None = None) -> Preferences:
        """Load preferences from disk, then apply CLI and environment overrides."""

        payload = self._read_payload()
        preferences = Preferences()
        needs_migration = False
        if payload:
            api_key, needs_migration = self._decrypt_api_key(
                payload.pop(_API_KEY_FIELD, None), payload.pop("api_key", None)
            )
            data = _filter_fields(payload)
            prompts = data.get("command_prompts")
            if isinstance(prompts, Mapping):
                merged = dict(DEFAULT_COMMAND_PROMPTS)
                merged.update({str(key): str(value) for key, value in prompts.items()})
                data["command_prompts"] = merged
            try:
                preferences = Preferences(**data)
            except TypeError as exc:
                LOGGER.warning("Preferences payload contained unexpected data: %s", exc)
            if api_key:
                preferences = replace(preferences, api_key=api_key)

        if needs_migration:
            try:
                self.save(preferences)
            except OSError as exc:  # pragma: no cover - read-only home directories
                LOGGER.warning("Failed to migrate preferences payload: %s", exc)

        if overrides:
            preferences = self._apply_overrides(preferences, overrides, source="CLI")
        return self._apply_env_overrides(preferences)

    def save(self, preferences: Preferences) -> Path:
        """Persist preferences with an atomic file replace."""

        data = asdict(preferences)
        api_key = data.pop("api_key", "") or ""
        if api_key:
            data[_API_KEY_FIELD] = self._vault.encrypt(api_key)
        data["version"] = _PREFERENCES_VERSION
        body = json.dumps(data, indent=2, sort_keys=True)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(".tmp")
        tmp_path.write_text(body, encoding="utf-8")
        tmp_path.replace(self._path)
        LOGGER.debug("Preferences saved to %s", self._path)
        return self._path

    def _read_payload(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as exc:
            LOGGER.warning("Preferences file %s is not valid JSON: %s", self._path, exc)
            return {}
        return dict(data) if isinstance(data, Mapping) else {}

    def _decrypt_api_key(self, ciphertext: str | None, legacy_plaintext: str | None) -> tuple[str, bool]:
        if ciphertext:
            try:
                return self._vault.decrypt(ciphertext), False
            except ValueError as exc:
                LOGGER.warning("Unable to decrypt API key: %s", exc)
                return "", False
        if legacy_plaintext:
            LOGGER.info("Detected plaintext API key; migrating to encrypted storage.")
            return legacy_plaintext, True
        return "", False

    def _apply_overrides(
        self,
        preferences: Preferences,
        overrides: Mapping[str, Any],
        *,
        source: str = "runtime",
    ) -> Preferences:
        allowed = {item.name for item in fields(Preferences)}
        filtered = {key: value for key, value in overrides.items() if key in allowed and value is not None}
        if filtered:
            LOGGER.debug("Applying %s preference overrides: %s", source, sorted(filtered))
            preferences = replace(preferences, **filtered)
        return preferences

    def _apply_env_overrides(self, preferences: Preferences) -> Preferences:
        overrides: Dict[str, Any] = {}
        for env_name, field_name in _ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is not None:
                overrides[field_name] = value
        for env_name, field_name in _BOOL_ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is not None:
                overrides[field_name] = value.strip().lower() in _TRUE_VALUES
        for env_name, field_name in _FLOAT_ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is None:
                continue
            try:
                overrides[field_name] = float(value)
            except ValueError:
                LOGGER.warning("Environment override %s=%s is not a valid float", env_name, value)
        if overrides:
            preferences = self._apply_overrides(preferences, overrides, source="environment")
        return preferences


def _filter_fields(payload: Mapping[str, Any]) -> Dict[str, Any]:
    allowed = {item.name for item in fields(Preferences)} - {"api_key"}
    return {key: value for key, value in payload.items() if key in allowed}


def redact_secret(value: str) -> str:
    stripped = (value or "").strip()
    if not stripped:
        return ""
    if len(stripped) <= 4:
        return "*" * len(stripped)
    return f"{stripped[:2]}{'*' * (len(stripped) - 4)}{stripped[-2:]}"
