import uuid
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from pydantic import BaseModel
from app.core.config import settings

http_bearer = HTTPBearer(auto_error=False)

class Principal(BaseModel):
    """The authenticated caller. Every query is scoped by user_id."""

    user_id: uuid.UUID
    roles: list[str] = []
    scopes: list[str] = []

    def grants(self, scope: str) -> bool:
        # "*" grants everything, "assets:*" grants every assets scope
        if "*" in self.scopes or scope in self.scopes:
            return True
        resource = scope.split(":", 1)[0]
        return f"{resource}:*" in self.scopes

def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )

def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG], audience=settings.REQUIRED_AUDIENCE)
    except JWTError as e:
        raise _unauthorized(f"Invalid token: {e}")

def principal_from_claims(claims: dict) -> Principal:
    raw_user = claims.get("sub") or claims.get("user_id")
    if not raw_user:
        raise _unauthorized("Token has no subject")
    try:
        user_id = uuid.UUID(str(raw_user))
    except ValueError:
        raise _unauthorized("Token subject is not a user id")
    scopes = claims.get("scopes", [])
    if isinstance(scopes, str):
        scopes = scopes.split()
    return Principal(user_id=user_id, roles=claims.get("roles", []), scopes=scopes)

async def get_principal(creds: HTTPAuthorizationCredentials | None = Depends(http_bearer)) -> Principal:
    # local dev without a token acts as the configured default user
    if creds is None and settings.ENV == "local":
        return Principal(user_id=uuid.UUID(settings.DEFAULT_USER_ID), roles=["admin"], scopes=["*"])
    if creds is None:
        raise _unauthorized("Missing token")
    return principal_from_claims(decode_token(creds.credentials))

def require_scopes(*needed: str):
    def dep(principal: Principal = Depends(get_principal)) -> Principal:
        missing = [s for s in needed if not principal.grants(s)]
        if missing:
            raise HTTPException(status_code=403, detail=f"Insufficient scopes: {', '.join(missing)}")
        return principal
    return dep
