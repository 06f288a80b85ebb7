from typing import Optional
from datetime import datetime, timezone, timedelta
from jose import jwt, JWTError
from fastapi import Depends, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from passlib.context import CryptContext
from sqlalchemy.future import select
from app.db.session import get_db
from app.models.user import User
from app.core.config import settings
from app.core.enums import UserRole
from app.core.errors import APIError

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False

def create_access_token(subject: str, role: str, expires_minutes: int | None = None) -> str:
    expires = expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    expire_dt = datetime.now(timezone.utc) + timedelta(minutes=expires)
    to_encode = {"sub": str(subject), "role": str(role), "exp": expire_dt}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm="HS256")


def _unauthorized(message: str) -> APIError:
    return APIError(
        status_code=status.HTTP_401_UNAUTHORIZED,
        message=message,
        code="UNAUTHORIZED",
    )


async def get_current_user(token: Optional[str] = Depends(oauth2_scheme), db: AsyncSession = Depends(get_db)) -> User:
    if not token:
        raise _unauthorized("Not authenticated")
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=["HS256"])
        user_id = payload.get("sub")
        if user_id is None or not str(user_id).isdigit():
            raise _unauthorized("Invalid token")
    except JWTError:
        raise _unauthorized("Invalid token")
    res = await db.execute(select(User).where(User.id == int(user_id)))
    user = res.scalars().first()
    if not user:
        raise _unauthorized("User not found")
    return user

def require_admin(user: User = Depends(get_current_user)):
    if user.role != UserRole.ADMIN:
        raise APIError(status_code=403, message="Admin access required", code="FORBIDDEN")
    return user
