"""
JWT utilities and FastAPI dependencies for user authentication.

The token carries the whole principal (id, role, structured grant) so that
permission checks on a request never touch the database.
"""
import logging
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext

from crm_access.core.config import settings
from crm_access.core.grants import Principal
from crm_access.core.session import AuthSession
from crm_access.models.user import User
from crm_access.services.permission_codec import encode_grant

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)

JWT_ALGORITHM = "HS256"


def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def principal_for_user(user: User) -> Principal:
    return Principal.from_payload(
        {"id": user.id, "funcao": user.funcao, "permissoes": user.permissoes}
    )


def create_access_token(principal: Principal) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": principal.id,
        "funcao": principal.role,
        "permissoes": encode_grant(principal.grant),
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


def principal_from_claims(claims: dict) -> Principal:
    return Principal.from_payload(claims)


# ── Dependencies ───────────────────────────────────────────────────────────

def get_auth_session(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AuthSession:
    """Request-scoped session; anonymous when no bearer token was sent."""
    session = AuthSession()
    if credentials:
        session.login(principal_from_claims(decode_token(credentials.credentials)))
    return session


def get_current_principal(
    session: AuthSession = Depends(get_auth_session),
) -> Principal:
    if not session.is_authenticated:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return session.principal


def require_permission(resource: str, action: str):
    """
    Returns a FastAPI dependency that checks the token grants `resource.action`.

    Usage:
        @router.get("/...", dependencies=[Depends(require_permission("users", "view"))])
    """

    def _checker(
        session: AuthSession = Depends(get_auth_session),
    ) -> AuthSession:
        # Auth disabled → allow everything
        if not settings.AUTH_ENABLED:
            return session

        if not session.is_authenticated:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

        if not session.can(resource, action):
            logger.info(
                "Denied %s.%s for principal %s (%s)",
                resource, action, session.principal.id, session.principal.role,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing permission: {resource}.{action}",
            )
        return session

    return _checker
