import logging
from typing import Callable, Optional

from infrastructure.storage.browser_storage import BrowserStorage

log = logging.getLogger(__name__)

StorageProvider = Callable[[], Optional[BrowserStorage]]


class CredentialStoreError(Exception):
    pass


class CredentialStore:
    """
    Bearer credentials of one principal ("user" or "admin").

    Every operation is a no-op returning None while the storage provider has
    no storage to offer (no running Streamlit script, e.g. bare imports and
    background threads).
    """

    def __init__(
        self,
        principal: str,
        storage_provider: StorageProvider,
        access_key: str,
        refresh_key: Optional[str] = None,
        refresh_writable: bool = True,
    ):
        self.principal = principal
        self._storage_provider = storage_provider
        self._access_key = access_key
        self._refresh_key = refresh_key
        self._refresh_writable = refresh_writable and refresh_key is not None

    def _storage(self) -> Optional[BrowserStorage]:
        return self._storage_provider()

    def set_access(self, token: str) -> None:
        storage = self._storage()
        if storage is None:
            return
        storage[self._access_key] = token

    def set_refresh(self, token: str) -> None:
        if not self._refresh_writable:
            raise CredentialStoreError(f"{self.principal} credentials have no refresh token")
        storage = self._storage()
        if storage is None:
            return
        storage[self._refresh_key] = token

    def get_access(self) -> Optional[str]:
        storage = self._storage()
        if storage is None:
            return None
        return storage.get(self._access_key)

    def get_refresh(self) -> Optional[str]:
        storage = self._storage()
        if storage is None or self._refresh_key is None:
            return None
        return storage.get(self._refresh_key)

    def clear(self) -> None:
        storage = self._storage()
        if storage is None:
            return
        keys = [self._access_key]
        if self._refresh_key is not None:
            keys.append(self._refresh_key)
        storage.remove_many(keys)
        log.info(f"Cleared {self.principal} credentials")

    def is_authenticated(self) -> bool:
        return self.get_access() is not None
