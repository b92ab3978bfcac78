"""Auth — Password hashing, bearer tokens and the login gate."""

from .hashing import AdaptiveHasher, SaltedDigestHasher
from .tokens import TokenIssuer
from .gate import AuthGate, AuthResult, AuthState

__all__ = [
    "AdaptiveHasher",
    "SaltedDigestHasher",
    "TokenIssuer",
    "AuthGate",
    "AuthResult",
    "AuthState",
]
