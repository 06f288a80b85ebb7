"""JSON documents kept in the ``settings`` table under ``<prefix><id>`` keys"""
import json
import logging
from typing import Optional, List
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from app.models.setting import Setting

logger = logging.getLogger(__name__)


async def get_document(db: AsyncSession, key: str) -> Optional[dict]:
    res = await db.execute(select(Setting).where(Setting.key == key))
    setting = res.scalars().first()
    if setting is None:
        return None
    try:
        return json.loads(setting.value)
    except ValueError:
        logger.warning(f"Failed to parse setting {key}")
        return None


async def put_document(db: AsyncSession, key: str, value: dict, category: str) -> None:
    res = await db.execute(select(Setting).where(Setting.key == key))
    setting = res.scalars().first()
    raw = json.dumps(value, default=str)
    if setting is None:
        db.add(Setting(key=key, value=raw, category=category))
    else:
        setting.value = raw
    await db.flush()


async def list_documents(db: AsyncSession, prefix: str, category: str) -> List[dict]:
    """Newest first; rows that fail to parse are skipped."""
    res = await db.execute(
        select(Setting)
        .where(Setting.category == category, Setting.key.startswith(prefix))
        .order_by(Setting.created_at.desc(), Setting.id.desc())
    )
    documents = []
    for setting in res.scalars().all():
        try:
            documents.append(json.loads(setting.value))
        except ValueError:
            logger.warning(f"Failed to parse setting {setting.key}")
    return documents


async def delete_document(db: AsyncSession, key: str) -> bool:
    res = await db.execute(delete(Setting).where(Setting.key == key))
    return res.rowcount > 0
