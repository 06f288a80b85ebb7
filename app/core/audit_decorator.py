import logging
from functools import wraps
from typing import Callable
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.audit_log import log_audit
from app.core.enums import AuditAction

logger = logging.getLogger(__name__)


def audit_log(action: AuditAction, resource: str) -> Callable:
    """Record an audit row after the wrapped admin endpoint succeeds.

    The endpoint must take ``db`` and ``current_user`` as keyword parameters;
    the first of ``payload``/``update``/``body`` found is hashed and the audit
    row is committed after the endpoint returns.
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            result = await func(*args, **kwargs)

            db: AsyncSession = kwargs.get("db")
            current_user = kwargs.get("current_user")

            if not db or not current_user:
                return result

            payload = None
            for key in ["payload", "update", "body"]:
                if key in kwargs:
                    payload = kwargs[key]
                    break

            await log_audit(db, current_user.id, action, payload, resource=resource)
            await db.commit()
            return result

        return wrapper
    return decorator
