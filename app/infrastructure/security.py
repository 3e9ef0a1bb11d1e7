"""Security helpers for issuing and verifying channel credentials."""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from app.config import get_settings
from app.domain.entities import AuthenticatedUser, RecipientType
from app.domain.errors import AuthenticationError

_ALGORITHM = "HS256"
_BEARER_PREFIX = "bearer "


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    return jwt.encode({**data, "exp": expire}, settings.secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, get_settings().secret_key, algorithms=[_ALGORITHM])
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc


def authenticate_token(raw_token: str | None) -> AuthenticatedUser:
    """Resolve the user behind ``raw_token`` or raise ``AuthenticationError``.

    The token may carry a ``Bearer`` prefix. The user identifier is read from
    the ``sub`` claim (``id`` is accepted for tokens minted by the legacy
    auth service) and the role from ``role``.
    """

    token = (raw_token or "").strip()
    if token.lower().startswith(_BEARER_PREFIX):
        token = token[len(_BEARER_PREFIX):].strip()
    if not token:
        raise AuthenticationError("Authentication error: No token provided")

    try:
        payload = decode_access_token(token)
    except ValueError as exc:
        raise AuthenticationError("Authentication error: Invalid token") from exc

    user_id = payload.get("sub") or payload.get("id")
    role = payload.get("role")
    if user_id in (None, "") or not isinstance(role, str):
        raise AuthenticationError("Authentication error: Invalid token")
    try:
        recipient_type = RecipientType(role.upper())
    except ValueError as exc:
        raise AuthenticationError(
            f"Authentication error: Unsupported role '{role}'"
        ) from exc

    return AuthenticatedUser(user_id=str(user_id), role=recipient_type)


__all__ = ["authenticate_token", "create_access_token", "decode_access_token"]
