from sqlalchemy import Column, String, Integer, Boolean, Text, JSON, DateTime
from app.models.base import BaseModel


class BlogPost(BaseModel):
    __tablename__ = "blog_posts"
    title = Column(String(200), nullable=False)
    slug = Column(String(220), unique=True, nullable=False, index=True)
    excerpt = Column(Text)
    content = Column(Text, nullable=False)
    featured_image = Column(String(500))
    images = Column(JSON, nullable=False, default=list)
    author = Column(String(120), nullable=False)
    category = Column(String(80), nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    is_published = Column(Boolean, nullable=False, default=False)
    published_at = Column(DateTime(timezone=True), nullable=True)
    views = Column(Integer, nullable=False, default=0)
    seo_title = Column(String(200))
    seo_description = Column(Text)
