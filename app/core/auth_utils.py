"""Lookup and authorization helpers shared by the routers"""
from typing import Optional, Union
from fastapi import Depends
from app.core.errors import APIError
from app.core.rate_limit import check_admin_rate_limit
from app.core.security import require_admin
from app.models.user import User


def check_not_found(
    item,
    resource_name: str = "Resource",
    resource_id: Optional[Union[int, str]] = None,
    code: str = "NOT_FOUND",
) -> None:

    if not item:
        if resource_id:
            raise APIError(
                status_code=404,
                message=f"{resource_name} with id {resource_id} not found",
                code=code,
            )
        raise APIError(status_code=404, message=f"{resource_name} not found", code=code)


async def rate_limited_admin(user: User = Depends(require_admin)) -> User:
    await check_admin_rate_limit(user.id)
    return user
