from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.schemas.auth import TokenOut
from app.models.user import User
from app.db.session import get_db
from app.core.security import create_access_token, verify_password
from app.core.audit_log import log_login
from app.core.errors import APIError

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenOut)
async def login(form_data: OAuth2PasswordRequestForm = Depends(), db: AsyncSession = Depends(get_db)):
    res = await db.execute(select(User).where(User.username == form_data.username))
    user = res.scalars().first()
    if not user or not verify_password(form_data.password, user.password_hash):
        raise APIError(status_code=400, message="Invalid credentials", code="INVALID_CREDENTIALS")

    await log_login(db, int(user.id), form_data.username)
    await db.commit()

    token = create_access_token(str(user.id), user.role)
    return {"access_token": token}
