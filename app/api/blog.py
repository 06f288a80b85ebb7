import logging
from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.db.session import get_db
from app.models.blog_post import BlogPost
from app.schemas.blog import BlogPostCreate
from app.core.audit_decorator import audit_log
from app.core.auth_utils import check_not_found, rate_limited_admin
from app.core.enums import AuditAction
from app.core.errors import APIError
from app.core.response_builders import success_response, build_blog_post_response
from app.utils.slug import slugify

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/blog", tags=["blog"])


@router.get("")
async def list_posts(
    published: bool = Query(False),
    category: Optional[str] = Query(None),
    tag: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    q = select(BlogPost)
    if published:
        q = q.where(BlogPost.is_published.is_(True))
    if category:
        q = q.where(func.lower(BlogPost.category) == category.lower())
    if search:
        term = search.lower()
        q = q.where(or_(
            func.lower(BlogPost.title).contains(term),
            func.lower(BlogPost.content).contains(term),
            func.lower(BlogPost.excerpt).contains(term),
        ))
    q = q.order_by(BlogPost.published_at.desc().nulls_last(), BlogPost.created_at.desc())
    if not tag:
        q = q.limit(limit)

    res = await db.execute(q)
    posts = res.scalars().all()
    if tag:
        posts = [p for p in posts if tag in (p.tags or [])][:limit]

    return success_response({
        "posts": [build_blog_post_response(p) for p in posts],
        "total": len(posts),
    })


@router.get("/{slug}")
async def get_post(slug: str, db: AsyncSession = Depends(get_db)):
    res = await db.execute(
        select(BlogPost).where(BlogPost.slug == slug, BlogPost.is_published.is_(True))
    )
    post = res.scalars().first()
    check_not_found(post, "Blog post")

    post.views = (post.views or 0) + 1
    await db.commit()
    await db.refresh(post)
    return success_response(build_blog_post_response(post))


@router.post("")
@audit_log(AuditAction.CREATE_BLOG_POST, "blog_posts")
async def create_post(
    payload: BlogPostCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(rate_limited_admin),
):
    slug = payload.slug or slugify(payload.title)
    if not slug:
        raise APIError(
            status_code=400,
            message="Validation failed",
            code="VALIDATION_ERROR",
            details=[{"field": "slug", "message": "Could not derive a slug from the title"}],
        )

    res = await db.execute(select(BlogPost.id).where(BlogPost.slug == slug))
    if res.scalars().first() is not None:
        raise APIError(status_code=409, message="A post with this slug already exists", code="SLUG_EXISTS")

    post = BlogPost(
        title=payload.title,
        slug=slug,
        excerpt=payload.excerpt,
        content=payload.content,
        featured_image=payload.featured_image,
        images=payload.images,
        author=payload.author,
        category=payload.category,
        tags=payload.tags,
        is_published=payload.is_published,
        published_at=datetime.now(timezone.utc) if payload.is_published else None,
        views=0,
        seo_title=payload.seo_title or payload.title,
        seo_description=payload.seo_description or payload.excerpt,
    )
    db.add(post)
    await db.commit()
    await db.refresh(post)

    logger.info(f"Blog post '{post.slug}' created by user {current_user.id}")
    return success_response(build_blog_post_response(post), "Blog post created successfully")
