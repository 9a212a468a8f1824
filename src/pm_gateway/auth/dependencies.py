"""FastAPI dependency: get_current_actor.

Usage in any protected router:
    from src.pm_gateway.auth.dependencies import get_current_actor

    @router.post("/protected")
    async def protected(actor: Annotated[str, Depends(get_current_actor)]):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from src.pm_common.errors import InvalidCredentialsError
from src.pm_gateway.auth.jwt_handler import decode_token

# Tokens are issued by the identity provider; tokenUrl only feeds Swagger UI
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_actor(token: str = Depends(oauth2_scheme)) -> str:
    """Extract and validate the JWT Bearer token, return the actor id.

    Raises HTTP 401 if the token is missing, invalid, or expired.
    """
    try:
        payload = decode_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    actor: str | None = payload.get("sub")
    if not actor:
        raise _CREDENTIALS_EXCEPTION
    return actor
