"""Session DTOs shared across application layers."""

from dataclasses import dataclass
from typing import Literal

Principal = Literal["user", "admin"]

USER: Principal = "user"
ADMIN: Principal = "admin"


@dataclass(frozen=True)
class SessionState:
    is_authenticated: bool = False
    is_loading: bool = True
