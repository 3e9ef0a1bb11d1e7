"""FastAPI dependency utilities."""

from fastapi import Depends, HTTPException, status
from fastapi.requests import HTTPConnection
from fastapi.security import OAuth2PasswordBearer

from app.domain.entities import AuthenticatedUser
from app.domain.errors import AuthenticationError
from app.infrastructure.notifications import PushGateway
from app.infrastructure.security import authenticate_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token", auto_error=False)


def get_current_principal(token: str | None = Depends(oauth2_scheme)) -> AuthenticatedUser:
    """Return the user behind the bearer token of the request."""

    try:
        return authenticate_token(token)
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


def get_push_gateway(connection: HTTPConnection) -> PushGateway:
    """Return the gateway built for the running application."""

    return connection.app.state.push_gateway
