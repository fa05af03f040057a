"""Key-value stores backing the provider credential vault."""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Dict, Optional, Protocol

TOKEN_KEY_PREFIX = "a2a_token_"
FILE_MODE = 0o600


class KeyValueStore(Protocol):
    """Minimal keyed storage used for provider tokens."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class InMemoryStore:
    """Process-local store, used in tests and ephemeral setups."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """Store persisted as a single JSON object on disk.

    The file is rewritten on every change through a temporary sibling and an
    atomic rename, so a crash never leaves a truncated file behind. It holds
    secrets, so it is readable by its owner only.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        with self._path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        if not isinstance(data, dict):
            raise ValueError(f"Credential file {self._path} does not hold a JSON object")
        return {str(key): str(value) for key, value in data.items()}

    def _dump(self, data: Dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2, sort_keys=True)
        os.chmod(tmp_path, FILE_MODE)
        os.replace(tmp_path, self._path)

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def delete(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._dump(data)


class CredentialVault:
    """Provider tokens namespaced inside a key-value store."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    @staticmethod
    def _key(provider_id: str) -> str:
        return f"{TOKEN_KEY_PREFIX}{provider_id}"

    def save_token(self, provider_id: str, token: str) -> None:
        self._store.set(self._key(provider_id), token)

    def get_token(self, provider_id: str) -> Optional[str]:
        return self._store.get(self._key(provider_id))

    def remove_token(self, provider_id: str) -> None:
        self._store.delete(self._key(provider_id))

    def has_auth(self, provider_id: str) -> bool:
        return bool(self.get_token(provider_id))
