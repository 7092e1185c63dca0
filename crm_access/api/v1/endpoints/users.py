import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from crm_access.core.auth import hash_password, require_permission
from crm_access.core.database import get_db
from crm_access.core.grants import normalize_role
from crm_access.core.permissions import is_known_capability
from crm_access.models.user import User
from crm_access.schemas.user import (
    UserCreate,
    UserListResponse,
    UserPermissionsForm,
    UserResponse,
    UserUpdate,
)
from crm_access.services.permission_codec import encode_grant, flatten, unflatten
from crm_access.services.permission_templates import defaults_for

logger = logging.getLogger(__name__)
router = APIRouter()


def user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "nome": user.nome,
        "email": user.email,
        "funcao": user.funcao,
        "telefone": user.telefone,
        "ativo": user.ativo,
        "permissoes": user.permissoes or {},
        "ultimo_login": user.ultimo_login,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }


def _validate_permissoes(permissoes: list[str]) -> None:
    invalid = [p for p in permissoes if not is_known_capability(p)]
    if invalid:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid permissions: {', '.join(invalid)}",
        )


def _get_user_or_404(db: Session, user_id: uuid.UUID) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
    dependencies=[Depends(require_permission("users", "create"))],
)
def create_user(
    body: UserCreate,
    db: Session = Depends(get_db),
) -> dict:
    email = body.email.strip().lower()
    existing = db.query(User).filter(User.email == email).first()
    if existing:
        raise HTTPException(status_code=409, detail="A user with this email already exists")

    funcao = normalize_role(body.funcao)

    # New accounts start from the role template unless the form sent its own list
    if body.permissoes is None:
        permissoes = sorted(defaults_for(funcao))
    else:
        permissoes = body.permissoes
        _validate_permissoes(permissoes)

    user = User(
        nome=body.nome,
        email=email,
        funcao=funcao,
        telefone=body.telefone,
        password_hash=hash_password(body.senha),
        permissoes=encode_grant(unflatten(permissoes)),
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("User '%s' created as %s with %d permissions", user.email, funcao, len(permissoes))
    return user_to_dict(user)


@router.get(
    "/users",
    response_model=UserListResponse,
    summary="List users",
    dependencies=[Depends(require_permission("users", "view"))],
)
def list_users(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    funcao: str | None = Query(None),
    db: Session = Depends(get_db),
) -> dict:
    query = db.query(User)
    if funcao:
        query = query.filter(User.funcao == normalize_role(funcao))

    total = query.count()
    users = (
        query.order_by(User.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return {"items": [user_to_dict(u) for u in users], "total": total}


@router.get(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="Get user details",
    dependencies=[Depends(require_permission("users", "view"))],
)
def get_user(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
) -> dict:
    return user_to_dict(_get_user_or_404(db, user_id))


@router.get(
    "/users/{user_id}/permissions",
    response_model=UserPermissionsForm,
    summary="Get a user's permissions as the flat list used by the edit form",
    dependencies=[Depends(require_permission("users", "edit"))],
)
def get_user_permissions(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
) -> dict:
    user = _get_user_or_404(db, user_id)
    return {
        "user_id": user.id,
        "funcao": user.funcao,
        "permissoes": sorted(flatten(user.permissoes)),
    }


@router.put(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="Update a user",
    dependencies=[Depends(require_permission("users", "edit"))],
)
def update_user(
    user_id: uuid.UUID,
    body: UserUpdate,
    db: Session = Depends(get_db),
) -> dict:
    user = _get_user_or_404(db, user_id)

    if body.nome is not None:
        user.nome = body.nome
    if body.email is not None:
        email = body.email.strip().lower()
        existing = db.query(User).filter(User.email == email, User.id != user_id).first()
        if existing:
            raise HTTPException(status_code=409, detail="Email already in use")
        user.email = email
    if body.senha is not None:
        user.password_hash = hash_password(body.senha)
    if body.funcao is not None:
        user.funcao = normalize_role(body.funcao)
    if body.telefone is not None:
        user.telefone = body.telefone
    if body.ativo is not None:
        user.ativo = body.ativo
    if body.permissoes is not None:
        _validate_permissoes(body.permissoes)
        # Owned-only / team-only levels do not survive the flat form
        user.permissoes = encode_grant(unflatten(body.permissoes))

    db.commit()
    db.refresh(user)

    logger.info("User '%s' updated", user.email)
    return user_to_dict(user)


@router.delete(
    "/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a user",
    dependencies=[Depends(require_permission("users", "delete"))],
)
def delete_user(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
) -> None:
    user = _get_user_or_404(db, user_id)
    db.delete(user)
    db.commit()
    logger.info("User '%s' deleted", user.email)
