"""
Settings storage.

User credentials for the book search service and the AI provider. Settings
are an explicit object handed to each component; loading and saving are
pure functions over any string key-value store.
"""

import json
import logging
from collections.abc import MutableMapping
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Iterator, Optional

import config.settings as config

logger = logging.getLogger(__name__)

AI_PROVIDERS = ("gemini", "openai")


@dataclass(frozen=True)
class AppSettings:
    """Credentials and provider choice."""
    naver_client_id: str = ""
    naver_client_secret: str = ""
    ai_provider: str = "gemini"  # "gemini" or "openai"
    gemini_api_key: str = ""
    openai_api_key: str = ""
    openai_model: str = config.DEFAULT_OPENAI_MODEL

    def __post_init__(self):
        if self.ai_provider not in AI_PROVIDERS:
            raise ValueError(
                f"Invalid ai_provider: {self.ai_provider}. Must be 'gemini' or 'openai'"
            )

    @property
    def ai_api_key(self) -> str:
        """API key of the selected AI provider."""
        if self.ai_provider == "gemini":
            return self.gemini_api_key
        return self.openai_api_key


DEFAULT_SETTINGS = AppSettings()

_FIELD_NAMES = {f.name for f in fields(AppSettings)}


def has_naver_keys(settings: AppSettings) -> bool:
    return bool(settings.naver_client_id and settings.naver_client_secret)


def has_ai_key(settings: AppSettings) -> bool:
    return bool(settings.ai_api_key)


def load_settings(store: MutableMapping, key: str = config.SETTINGS_STORAGE_KEY) -> AppSettings:
    """
    Load settings from a key-value store.

    Stored values are merged over the defaults. A missing or unreadable
    entry yields the defaults.
    """
    raw = store.get(key)
    if not raw:
        return DEFAULT_SETTINGS

    try:
        data = json.loads(raw)
        known = {name: value for name, value in data.items() if name in _FIELD_NAMES}
        return replace(DEFAULT_SETTINGS, **known)
    except (ValueError, TypeError, AttributeError) as e:
        logger.warning(f"Ignoring unreadable settings entry '{key}': {e}")
        return DEFAULT_SETTINGS


def save_settings(
    store: MutableMapping,
    updates: dict,
    key: str = config.SETTINGS_STORAGE_KEY
) -> AppSettings:
    """
    Merge updates into the stored settings and write them back.

    Args:
        store: Backing key-value store
        updates: Partial settings (field name -> value)

    Returns:
        The merged settings that were written
    """
    unknown = set(updates) - _FIELD_NAMES
    if unknown:
        raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")

    merged = replace(load_settings(store, key), **updates)
    store[key] = json.dumps(asdict(merged), ensure_ascii=False)
    logger.info(f"Saved settings (ai_provider={merged.ai_provider})")
    return merged


def settings_from_env(base: Optional[AppSettings] = None) -> AppSettings:
    """Overlay non-empty environment configuration on base settings."""
    base = base or DEFAULT_SETTINGS
    overrides = {
        "naver_client_id": config.NAVER_CLIENT_ID,
        "naver_client_secret": config.NAVER_CLIENT_SECRET,
        "ai_provider": config.AI_PROVIDER,
        "gemini_api_key": config.GEMINI_API_KEY,
        "openai_api_key": config.OPENAI_API_KEY,
        "openai_model": config.OPENAI_MODEL,
    }
    return replace(base, **{name: value for name, value in overrides.items() if value})


class JsonFileStore(MutableMapping):
    """
    String key-value store persisted as a single JSON file.

    The file is rewritten on every change; its directory is created on
    first write.
    """

    def __init__(self, path=config.SETTINGS_PATH):
        self.path = Path(path)
        self._data = self._read()

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return data if isinstance(data, dict) else {}
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read settings file {self.path}: {e}")
            return {}

    def _write(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, ensure_ascii=False, indent=2)
        except OSError as e:
            logger.error(f"Failed to write settings file {self.path}: {e}")
            raise

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __setitem__(self, key: str, value: str) -> None:
        self._data[key] = value
        self._write()

    def __delitem__(self, key: str) -> None:
        del self._data[key]
        self._write()

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)
