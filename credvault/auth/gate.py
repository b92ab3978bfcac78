"""
AuthGate — Registration, login and token authentication.

Each attempt moves ``START -> VALIDATED -> ISSUED`` or ``START -> REJECTED``.
Login failures are uniform: an unknown email and a wrong password raise the
same ``InvalidCredentials`` with the same message, and an unknown email still
pays for a bcrypt check, so callers cannot enumerate accounts.

There is no implicit hash-on-save: every flow that changes a secret hashes
it explicitly, once, from the new plaintext.

Security Note:
    Never log passwords or digests. Failure reasons are logged, never
    returned to end users.
"""
import re
import enum
import logging
from dataclasses import dataclass

from ..exceptions import (
    AuthError,
    DuplicateError,
    InvalidCredentials,
    ValidationError,
)
from ..models import Account, TokenClaims, utcnow
from ..storage import AccountStore
from .hashing import AdaptiveHasher
from .tokens import TokenIssuer

logger = logging.getLogger("credvault.auth")

_EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")
_NAME_MAX_LENGTH = 50


class AuthState(enum.Enum):
    START = "start"
    VALIDATED = "validated"
    ISSUED = "issued"
    REJECTED = "rejected"


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a successful login or registration."""

    account: Account
    claims: TokenClaims
    token: str
    state: AuthState = AuthState.ISSUED


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _require_text(values: dict) -> None:
    wrong = [name for name, value in values.items() if not isinstance(value, str)]
    if wrong:
        raise ValidationError("Fields must be text", fields=wrong)


class AuthGate:
    """Turns credentials into a verified identity, or rejects them."""

    def __init__(
        self,
        store: AccountStore,
        hasher: AdaptiveHasher,
        issuer: TokenIssuer,
        min_password_length: int = 8,
    ):
        self._store = store
        self._hasher = hasher
        self._issuer = issuer
        self.min_password_length = min_password_length

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    def _check_secret(self, value: str, label: str, field: str) -> None:
        if not isinstance(value, str):
            raise ValidationError(f"{label} must be text", fields=[field])
        if len(value) < self.min_password_length:
            raise ValidationError(
                f"{label} must be at least {self.min_password_length} characters long",
                fields=[field],
            )

    def _transition(self, email: str, state: AuthState, reason: str = "") -> None:
        logger.debug("Auth attempt email=%s state=%s %s", email, state.value, reason)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        master_password: str,
    ) -> Account:
        """Create an account with both secrets hashed.

        Raises:
            ValidationError: Missing fields, malformed email, names too long,
                short secrets, or master password equal to the password.
            DuplicateError: An account already uses this email.
        """
        values = {
            "email": email,
            "password": password,
            "first_name": first_name,
            "last_name": last_name,
            "master_password": master_password,
        }
        missing = [
            k for k, v in values.items()
            if v is None or (isinstance(v, str) and not v.strip())
        ]
        if missing:
            raise ValidationError(
                "All fields are required: email, password, firstName, "
                "lastName, masterPassword",
                fields=missing,
            )
        _require_text(values)

        email = normalize_email(email)
        first_name = first_name.strip()
        last_name = last_name.strip()
        if not _EMAIL_PATTERN.match(email):
            raise ValidationError("Please enter a valid email", fields=["email"])
        for field, value in (("first_name", first_name), ("last_name", last_name)):
            if len(value) > _NAME_MAX_LENGTH:
                raise ValidationError(
                    f"{field} cannot exceed {_NAME_MAX_LENGTH} characters",
                    fields=[field],
                )
        self._check_secret(password, "Password", "password")
        self._check_secret(master_password, "Master password", "master_password")
        if password == master_password:
            raise ValidationError(
                "Master password must differ from the account password",
                fields=["master_password"],
            )

        if self._store.find_account_by_email(email) is not None:
            self._transition(email, AuthState.REJECTED, "duplicate")
            raise DuplicateError()
        self._transition(email, AuthState.VALIDATED)

        account = Account(
            email=email,
            password_hash=self._hasher.hash(password),
            master_password_hash=self._hasher.hash(master_password),
            first_name=first_name,
            last_name=last_name,
        )
        account = self._store.save_account(account)
        logger.info("Account registered: account=%s", account.id)
        return account

    # ------------------------------------------------------------------
    # Login and tokens
    # ------------------------------------------------------------------

    def issue_for(self, account: Account) -> AuthResult:
        """Mint a token for an already verified account."""
        token, claims = self._issuer.issue(account)
        self._transition(account.email, AuthState.ISSUED)
        return AuthResult(account=account, claims=claims, token=token)

    def login(self, email: str, password: str) -> AuthResult:
        """Verify the account password and issue a token.

        Raises:
            ValidationError: Email or password missing or not text.
            InvalidCredentials: Unknown email or wrong password.
        """
        blank_email = isinstance(email, str) and not email.strip()
        if not email or not password or blank_email:
            raise ValidationError(
                "Email and password are required", fields=["email", "password"]
            )
        _require_text({"email": email, "password": password})
        email = normalize_email(email)
        account = self._store.find_account_by_email(email)
        if account is None:
            self._hasher.dummy_verify(password)
            self._transition(email, AuthState.REJECTED, "unknown_email")
            logger.info("Login rejected: reason=%s", InvalidCredentials.reason)
            raise InvalidCredentials()
        if not self._hasher.verify(password, account.password_hash):
            self._transition(email, AuthState.REJECTED, "bad_password")
            logger.info(
                "Login rejected: account=%s reason=%s",
                account.id, InvalidCredentials.reason,
            )
            raise InvalidCredentials()
        self._transition(email, AuthState.VALIDATED)

        if self._hasher.needs_rehash(account.password_hash):
            account.password_hash = self._hasher.hash(password)
            logger.info("Password digest upgraded: account=%s", account.id)
        account.last_login = utcnow()
        account = self._store.save_account(account)
        logger.info("Login succeeded: account=%s", account.id)
        return self.issue_for(account)

    def authenticate(self, token: str) -> TokenClaims:
        """Verify a bearer token from an inbound request.

        Raises:
            AuthError: Expired, badly signed or malformed token. The
                ``reason`` attribute tells them apart for diagnostics.
        """
        try:
            return self._issuer.verify(token)
        except AuthError as err:
            logger.info("Token rejected: reason=%s", err.reason)
            raise

    def current_account(self, token: str) -> Account:
        """Account behind a bearer token.

        Raises:
            AuthError: Invalid token, or the account no longer exists.
        """
        claims = self.authenticate(token)
        account = self._store.find_account_by_id(claims.account_id)
        if account is None:
            logger.info("Token rejected: reason=unknown_account account=%s", claims.account_id)
            raise AuthError("User not found")
        return account

    # ------------------------------------------------------------------
    # Secret management
    # ------------------------------------------------------------------

    def verify_master_password(self, account: Account, master_password: str) -> bool:
        return self._hasher.verify(master_password, account.master_password_hash)

    def change_password(
        self, account: Account, current_password: str, new_password: str
    ) -> Account:
        """Replace the account password after checking the current one.

        Raises:
            InvalidCredentials: Current password is wrong.
            ValidationError: New password too short, unchanged, or equal to
                the master password.
        """
        if not self._hasher.verify(current_password, account.password_hash):
            raise InvalidCredentials()
        self._check_secret(new_password, "Password", "password")
        if new_password == current_password:
            raise ValidationError("New password must differ from the current one", fields=["password"])
        if self._hasher.verify(new_password, account.master_password_hash):
            raise ValidationError(
                "Password must differ from the master password", fields=["password"]
            )
        account.password_hash = self._hasher.hash(new_password)
        account.touch()
        logger.info("Password changed: account=%s", account.id)
        return self._store.save_account(account)

    def change_master_password(
        self, account: Account, current_master: str, new_master: str
    ) -> Account:
        """Replace the master password after checking the current one.

        Raises:
            InvalidCredentials: Current master password is wrong.
            ValidationError: New master password too short, unchanged, or
                equal to the account password.
        """
        if not self._hasher.verify(current_master, account.master_password_hash):
            raise InvalidCredentials()
        self._check_secret(new_master, "Master password", "master_password")
        if new_master == current_master:
            raise ValidationError(
                "New master password must differ from the current one",
                fields=["master_password"],
            )
        if self._hasher.verify(new_master, account.password_hash):
            raise ValidationError(
                "Master password must differ from the account password",
                fields=["master_password"],
            )
        account.master_password_hash = self._hasher.hash(new_master)
        account.touch()
        logger.info("Master password changed: account=%s", account.id)
        return self._store.save_account(account)
