"""API Dependencies - Authentication"""
import logging
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from domain.auth import Identity, User
from domain.enums import Role
from domain.repositories import UserRepository
from infrastructure.config import settings
from infrastructure.repositories.in_memory_repositories import InMemoryUserRepository
from infrastructure.security import decode_access_token, get_password_hash
from api.schemas import TokenData

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")

# Shared user store, also used by the services wired up in main.py
user_repo = InMemoryUserRepository()


async def seed_admin(repository: UserRepository) -> User:
    """Create the bootstrap admin account once"""
    existing = await repository.find_by_email(settings.ADMIN_EMAIL)
    if existing:
        return existing
    admin = User.register(
        email=settings.ADMIN_EMAIL,
        password=settings.ADMIN_PASSWORD,
        full_name="Admin User",
        role=Role.ADMIN,
        hasher=get_password_hash,
    )
    logger.info("Seeded admin account %s", admin.email)
    return await repository.save(admin)


def get_user_repository() -> UserRepository:
    return user_repo


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    repository: UserRepository = Depends(get_user_repository),
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
        subject: str = payload.get("sub")
        if subject is None:
            raise credentials_exception
        token_data = TokenData(user_id=UUID(subject))
    except (JWTError, ValueError):
        raise credentials_exception

    user = await repository.find_by_id(token_data.user_id)
    if user is None:
        raise credentials_exception
    return user


async def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.status:
        raise HTTPException(status_code=400, detail="Inactive user")
    return current_user


async def get_current_identity(current_user: User = Depends(get_current_active_user)) -> Identity:
    return current_user.identity()
