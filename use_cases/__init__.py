"""Application layer contracts for orchestrating high-level flows."""

from .auth_flow import AuthFlowResult, AuthFlowStatus, LoginFlow, SessionContext, require_authenticated
from .bootstrap import AppContainer, StartupResult, StartupStatus, run_startup
from .error_policy import ErrorKind, ValidationError, classify, user_message
from .oauth_flow import CallbackRoute, Intent, OAuthCallbackHandler, PendingIntentStore
from .session_models import Principal, SessionState
from .terminal_guard import GuardState, TerminalGuard

__all__ = [
    "AppContainer",
    "AuthFlowResult",
    "AuthFlowStatus",
    "CallbackRoute",
    "ErrorKind",
    "GuardState",
    "Intent",
    "LoginFlow",
    "OAuthCallbackHandler",
    "PendingIntentStore",
    "Principal",
    "SessionContext",
    "SessionState",
    "StartupResult",
    "StartupStatus",
    "TerminalGuard",
    "ValidationError",
    "classify",
    "require_authenticated",
    "run_startup",
    "user_message",
]
