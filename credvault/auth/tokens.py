"""
Stateless bearer tokens.

Tokens are HS256 JWTs carrying the account identity and a fixed expiry
window (7 days by default). There is no server-side session and no
revocation list: a leaked token stays valid until it expires.

Emergency procedure:
    Rotating VAULT_TOKEN_SECRET invalidates every outstanding token at once.
    It is the only revocation lever and logs every user out, so it is
    reserved for suspected secret or token leaks, not routine operations.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

import jwt

from ..exceptions import InvalidSignature, MalformedToken, TokenExpired
from ..models import Account, TokenClaims

logger = logging.getLogger("credvault.auth")

ALGORITHM = "HS256"
ISSUER = "credvault"
_REQUIRED_CLAIMS = ["sub", "iat", "exp", "iss"]


class TokenIssuer:
    """Signs and verifies bearer tokens with a server-held secret."""

    def __init__(self, secret: str, expiry: Union[int, timedelta] = timedelta(days=7)):
        if not secret:
            raise ValueError("token signing secret cannot be empty")
        self._secret = secret
        self.expiry = expiry if isinstance(expiry, timedelta) else timedelta(seconds=expiry)

    def issue(
        self,
        subject: Union[Account, TokenClaims],
        now: Optional[datetime] = None,
    ) -> tuple[str, TokenClaims]:
        """Mint a token for an account (or re-mint from existing claims).

        Args:
            subject: Account or claims whose identity fields are signed.
            now: Issuance time; defaults to the current UTC time. A naive
                value is taken as UTC.

        Returns:
            Tuple of (token, claims as signed).
        """
        issued_at = (now or datetime.now(timezone.utc)).replace(microsecond=0)
        if issued_at.tzinfo is None:
            issued_at = issued_at.replace(tzinfo=timezone.utc)
        else:
            issued_at = issued_at.astimezone(timezone.utc)
        if isinstance(subject, Account):
            account_id = subject.id
        else:
            account_id = subject.account_id
        claims = TokenClaims(
            account_id=account_id,
            email=subject.email,
            first_name=subject.first_name,
            last_name=subject.last_name,
            issued_at=issued_at,
            expires_at=issued_at + self.expiry,
        )
        payload = {
            "sub": claims.account_id,
            "email": claims.email,
            "first_name": claims.first_name,
            "last_name": claims.last_name,
            "iss": ISSUER,
            "iat": claims.issued_at,
            "exp": claims.expires_at,
        }
        token = jwt.encode(payload, self._secret, algorithm=ALGORITHM)
        logger.debug("Token issued: account=%s", claims.account_id)
        return token, claims

    def verify(self, token: str) -> TokenClaims:
        """Check signature and expiry, returning the signed claims.

        Raises:
            TokenExpired: The expiry window has passed.
            InvalidSignature: The token was signed with another secret.
            MalformedToken: The token is not a structurally valid credvault token.
        """
        if not isinstance(token, str) or not token:
            raise MalformedToken("Token is empty")
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                issuer=ISSUER,
                options={"require": _REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as err:
            raise TokenExpired("Token has expired") from err
        except jwt.InvalidSignatureError as err:
            raise InvalidSignature("Token signature is invalid") from err
        except jwt.InvalidTokenError as err:
            raise MalformedToken(f"Token is malformed: {type(err).__name__}") from err

        try:
            return TokenClaims(
                account_id=payload["sub"],
                email=payload["email"],
                first_name=payload.get("first_name", ""),
                last_name=payload.get("last_name", ""),
                issued_at=datetime.fromtimestamp(payload["iat"], timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], timezone.utc),
            )
        except (KeyError, TypeError, ValueError) as err:
            raise MalformedToken("Token claims are incomplete") from err
