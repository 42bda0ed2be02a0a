from __future__ import annotations

import uuid

import structlog
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from eventhub.auth.password import hash_password, password_needs_rehash, verify_password
from eventhub.models import RSVP, Event, User, UserRole
from eventhub.services.error_codes import ErrorCode
from eventhub.services.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    StoreError,
    ValidationError,
)

logger = structlog.get_logger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def find_by_email(db: Session, email: str) -> User | None:
    return db.scalar(select(User).where(User.email == normalize_email(email)))


def get_user(db: Session, user_id: uuid.UUID) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError(ErrorCode.USER_NOT_FOUND.value, "User not found")
    return user


def create_user(
    db: Session,
    email: str,
    password: str,
    name: str,
    role: UserRole = UserRole.USER,
) -> User:
    email = normalize_email(email)
    if find_by_email(db, email):
        raise ConflictError(
            ErrorCode.EMAIL_ALREADY_REGISTERED.value, "User with this email already exists"
        )

    user = User(email=email, password_hash=hash_password(password), name=name, role=role)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(
            ErrorCode.EMAIL_ALREADY_REGISTERED.value, "User with this email already exists"
        ) from exc

    db.refresh(user)
    logger.info("user_registered", user_id=str(user.id), role=user.role.value)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    user = find_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        raise AuthenticationError(
            ErrorCode.INVALID_CREDENTIALS.value, "Invalid email or password"
        )

    if password_needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        db.add(user)
        db.commit()
        db.refresh(user)

    return user


def update_user(
    db: Session,
    user_id: uuid.UUID,
    name: str | None = None,
    email: str | None = None,
) -> User:
    if name is None and email is None:
        raise ValidationError(ErrorCode.NO_FIELDS_TO_UPDATE.value, "No fields to update")

    user = get_user(db, user_id)

    if email is not None:
        email = normalize_email(email)
        other = find_by_email(db, email)
        if other and other.id != user.id:
            raise ConflictError(ErrorCode.EMAIL_TAKEN.value, "Email is already taken")
        user.email = email
    if name is not None:
        user.name = name

    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(ErrorCode.EMAIL_TAKEN.value, "Email is already taken") from exc

    db.refresh(user)
    return user


def list_users(db: Session, page: int, limit: int) -> tuple[list[User], int]:
    total = int(db.scalar(select(func.count()).select_from(User)) or 0)
    users = db.scalars(
        select(User)
        .order_by(User.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()
    return list(users), total


def delete_user(db: Session, actor_id: uuid.UUID, user_id: uuid.UUID) -> None:
    if actor_id == user_id:
        raise ValidationError(ErrorCode.CANNOT_DELETE_SELF.value, "Cannot delete your own account")

    user = get_user(db, user_id)
    try:
        db.execute(delete(RSVP).where(RSVP.user_id == user.id))
        db.execute(update(Event).where(Event.created_by == user.id).values(created_by=None))
        db.delete(user)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreError(ErrorCode.STORE_ERROR.value, "Failed to delete user") from exc

    logger.info("user_deleted", user_id=str(user_id), actor_id=str(actor_id))
