import json
import logging
from typing import Any, Callable, Iterable, Mapping, MutableMapping, Optional
from urllib.parse import quote, unquote

log = logging.getLogger(__name__)

COOKIE_PREFIX = "tk"

AREA_LOCAL = "local"
AREA_SESSION = "session"


def build_script(statements: Iterable[str], redirect_url: Optional[str] = None) -> str:
    navigation = ""
    if redirect_url:
        navigation = f"window.parent.location.href = {json.dumps(redirect_url)};"
    return (
        "<script>"
        "function _setCookie(c) {"
        "  document.cookie = c;"
        "  try { window.parent.document.cookie = c; } catch (e) {}"
        "}"
        f"{''.join(statements)}{navigation}"
        "</script>"
    )


class BrowserStorage:
    """
    Key/value area shared with the browser.

    Reads come from a per-tab mirror kept in Streamlit session state. The
    mirror is hydrated once from the request cookies, so values survive page
    reloads and external redirects. Writes update the mirror immediately and
    queue a cookie script that `flush` hands to the page.

    `local` values carry a max-age; `session` values are session cookies and
    disappear with the browser session.
    """

    def __init__(
        self,
        area: str,
        state: MutableMapping,
        cookies: Optional[Mapping[str, str]] = None,
        max_age: Optional[int] = None,
    ):
        self.area = area
        self.max_age = max_age
        self._state = state
        self._mirror_key = f"_browser_storage_{area}"
        self._pending_key = f"_browser_storage_{area}_pending"

        if self._mirror_key not in self._state:
            self._state[self._mirror_key] = self._hydrate(cookies or {})
        if self._pending_key not in self._state:
            self._state[self._pending_key] = []

    def _cookie_name(self, key: str) -> str:
        return f"{COOKIE_PREFIX}_{self.area}_{key}"

    def _hydrate(self, cookies: Mapping[str, str]) -> dict:
        prefix = f"{COOKIE_PREFIX}_{self.area}_"
        restored = {}
        for name, value in cookies.items():
            if name.startswith(prefix) and value:
                restored[name[len(prefix):]] = unquote(value)
        if restored:
            log.info(f"Restored {len(restored)} key(s) into {self.area} storage from cookies")
        return restored

    @property
    def _mirror(self) -> dict:
        return self._state[self._mirror_key]

    def get(self, key: str, default: Any = None) -> Any:
        return self._mirror.get(key, default)

    def __contains__(self, key: str) -> bool:
        return key in self._mirror

    def __getitem__(self, key: str) -> str:
        return self._mirror[key]

    def __setitem__(self, key: str, value: str) -> None:
        self._mirror[key] = value
        self._queue(self._set_cookie_js(key, value))

    def pop(self, key: str, default: Any = None) -> Any:
        value = self._mirror.pop(key, default)
        self._queue(self._delete_cookie_js(key))
        return value

    def remove_many(self, keys: Iterable[str]) -> None:
        """Drop several keys in one mirror update and one queued script."""
        keys = list(keys)
        for key in keys:
            self._mirror.pop(key, None)
        self._queue("".join(self._delete_cookie_js(key) for key in keys))

    def _queue(self, statement: str) -> None:
        self._state[self._pending_key].append(statement)

    def _set_cookie_js(self, key: str, value: str) -> str:
        cookie = f"{self._cookie_name(key)}={quote(str(value), safe='')}; path=/; SameSite=Lax"
        if self.max_age is not None:
            cookie += f"; max-age={self.max_age}"
        return f"_setCookie({json.dumps(cookie)});"

    def _delete_cookie_js(self, key: str) -> str:
        cookie = f"{self._cookie_name(key)}=; path=/; max-age=0; SameSite=Lax"
        return f"_setCookie({json.dumps(cookie)});"

    def has_pending_writes(self) -> bool:
        return bool(self._state[self._pending_key])

    def pending_script(self, redirect_url: Optional[str] = None) -> str:
        return build_script(self._state[self._pending_key], redirect_url)

    def take_pending(self) -> list:
        statements = self._state[self._pending_key]
        self._state[self._pending_key] = []
        return statements

    def flush(self, render: Callable[[str], Any], redirect_url: Optional[str] = None) -> bool:
        """Hand queued cookie writes (and an optional navigation) to the page."""
        return flush_all([self], render, redirect_url=redirect_url)


def flush_all(storages: Iterable[Optional[BrowserStorage]], render: Callable[[str], Any], redirect_url: Optional[str] = None) -> bool:
    """Flush several areas through one script so a navigation runs after every write."""
    statements = []
    for storage in storages:
        if storage is None:
            continue
        statements.extend(storage.take_pending())
    if not statements and not redirect_url:
        return False
    render(build_script(statements, redirect_url))
    return True
