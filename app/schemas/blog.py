from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class BlogPostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1, max_length=120)
    category: str = Field(..., min_length=1, max_length=80)
    slug: Optional[str] = Field(None, max_length=220)
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    images: List[str] = []
    tags: List[str] = []
    is_published: bool = False
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None


class BlogPostOut(BaseModel):
    id: int
    title: str
    slug: str
    excerpt: Optional[str]
    content: str
    featured_image: Optional[str]
    images: List[str] = []
    author: str
    category: str
    tags: List[str] = []
    is_published: bool
    published_at: Optional[datetime]
    views: int
    seo_title: Optional[str]
    seo_description: Optional[str]
    estimated_read_time: int
    created_at: datetime
