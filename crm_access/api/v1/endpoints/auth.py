import logging
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from crm_access.api.v1.endpoints.users import user_to_dict
from crm_access.core.auth import (
    create_access_token,
    get_current_principal,
    principal_for_user,
    verify_password,
)
from crm_access.core.database import get_db
from crm_access.core.grants import Principal
from crm_access.models.user import User
from crm_access.schemas.permission import PrincipalPayload
from crm_access.schemas.user import LoginRequest, LoginResponse
from crm_access.services.permission_codec import encode_grant

logger = logging.getLogger(__name__)
router = APIRouter()


def _principal_to_payload(principal: Principal) -> dict:
    return {
        "id": principal.id,
        "role": principal.role,
        "permissions": encode_grant(principal.grant),
    }


@router.post(
    "/auth/login",
    response_model=LoginResponse,
    summary="Login and obtain JWT token",
)
def login(
    body: LoginRequest,
    db: Session = Depends(get_db),
) -> dict:
    email = body.email.strip().lower()
    user = db.query(User).filter(User.email == email, User.ativo.is_(True)).first()
    if not user or not verify_password(body.senha, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    user.ultimo_login = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)

    token = create_access_token(principal_for_user(user))
    logger.info("User '%s' logged in (%s)", user.email, user.funcao)

    return {"access_token": token, "token_type": "bearer", "user": user_to_dict(user)}


@router.post(
    "/auth/refresh",
    response_model=LoginResponse,
    summary="Re-issue the token with the user's current permissions",
)
def refresh(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> dict:
    user = db.query(User).filter(User.id == _parse_uuid(principal.id), User.ativo.is_(True)).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
        )

    token = create_access_token(principal_for_user(user))
    return {"access_token": token, "token_type": "bearer", "user": user_to_dict(user)}


@router.get(
    "/auth/me",
    response_model=PrincipalPayload,
    summary="Get the principal carried by the current token",
)
def get_me(principal: Principal = Depends(get_current_principal)) -> dict:
    return _principal_to_payload(principal)


def _parse_uuid(value: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
