"""Blog Routes — posts, publication workflow and visitor comments.

Invariants:
    - Slug derived from the title; a second post with the same slug is a 409
    - Slugs that collide with a static path (/blogs/dashboard) are refused (400)
    - Public listing shows published posts only; the dashboard shows all
    - Reading a post by slug increments its views
    - Media destroyed after the delete commits
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import client_ip, require_admin, require_staff
from app.core.domain_types import PublicationStatus, TimestampType
from app.core.errors import ConflictError, InvalidInputError, ResourceNotFoundError
from app.core.slugs import slugify
from app.infrastructure.clients import ExternalClients, get_clients
from app.infrastructure.database import get_db
from app.models.blog import Blog
from app.models.blog_comment import BlogComment
from app.models.user import User
from app.schemas.common import dump
from app.schemas.content import BlogOut, CommentCreate, CommentOut, PublicationUpdate
from app.services.lookups import get_or_404
from app.services.media_cleanup import destroy_quietly
from app.services.timestamps import touch

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/blogs", tags=["blogs"])

MEDIA_FOLDER = "blogs"
# Static path segments under /blogs that a post slug would be shadowed by
RESERVED_SLUGS = frozenset({"dashboard"})


async def _blog_by_slug(db: AsyncSession, slug: str) -> Blog:
    result = await db.execute(select(Blog).where(Blog.slug == slug))
    blog = result.scalar_one_or_none()
    if blog is None:
        raise ResourceNotFoundError("Blog", slug)
    return blog


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_blog(
    title: str = Form(..., min_length=1, max_length=300),
    author: str = Form(..., min_length=1, max_length=200),
    excerpt: str = Form(..., min_length=1),
    content: str = Form(..., min_length=1),
    thumbnail: UploadFile | None = File(None),
    images: list[UploadFile] | None = File(None),
    user: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    slug = slugify(title)
    if not slug:
        raise InvalidInputError("Title must contain letters or digits.", field="title")
    if slug in RESERVED_SLUGS:
        raise InvalidInputError(f"The title \"{title}\" is reserved.", field="title")
    taken = await db.execute(select(Blog.id).where(Blog.slug == slug))
    if taken.scalar_one_or_none() is not None:
        raise ConflictError("A blog with this title already exists.")

    cover = None
    if thumbnail is not None:
        cover = await clients.media.upload(await thumbnail.read(), folder=MEDIA_FOLDER)
    gallery = [
        await clients.media.upload(await f.read(), folder=MEDIA_FOLDER)
        for f in images or []
    ]
    blog = Blog(
        title=title, slug=slug, author=author, excerpt=excerpt, content=content,
        thumbnail=cover, images=gallery,
    )
    db.add(blog)
    await touch(db, TimestampType.BLOG)
    await db.commit()
    await db.refresh(blog)
    logger.info("Blog created", extra={"resource": slug})
    return {"message": "Blog created successfully", "blog": dump(BlogOut, blog)}


@router.get("")
async def published_blogs(db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(Blog)
        .where(Blog.status == PublicationStatus.PUBLISHED.value)
        .order_by(Blog.created_at.desc())
    )
    return {"message": "Blogs fetched", "blogs": dump(BlogOut, list(result.scalars()))}


@router.get("/dashboard")
async def all_blogs(
    user: User = Depends(require_staff), db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(Blog).order_by(Blog.created_at.desc()))
    return {"message": "Blogs fetched", "blogs": dump(BlogOut, list(result.scalars()))}


@router.get("/{slug}")
async def read_blog(slug: str, db: AsyncSession = Depends(get_db)):
    blog = await _blog_by_slug(db, slug)
    blog.views += 1
    await db.commit()
    await db.refresh(blog)
    return {"message": "Blog fetched", "blog": dump(BlogOut, blog)}


@router.put("/{blog_id}/status")
async def set_blog_status(
    blog_id: UUID,
    body: PublicationUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    blog = await get_or_404(db, Blog, blog_id, "Blog")
    blog.status = body.status.value
    await touch(db, TimestampType.BLOG)
    await db.commit()
    await db.refresh(blog)
    return {"message": "Blog status updated", "blog": dump(BlogOut, blog)}


@router.delete("/{blog_id}")
async def delete_blog(
    blog_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    blog = await get_or_404(db, Blog, blog_id, "Blog")
    public_ids = [img.get("public_id") for img in blog.images or []]
    if blog.thumbnail:
        public_ids.append(blog.thumbnail.get("public_id"))
    comments = await db.execute(select(BlogComment).where(BlogComment.blog_id == blog.id))
    for comment in comments.scalars():
        await db.delete(comment)
    await db.delete(blog)
    await touch(db, TimestampType.BLOG)
    await db.commit()
    for public_id in public_ids:
        await destroy_quietly(clients.media, public_id)
    logger.info("Blog deleted", extra={"resource": str(blog_id)})
    return {"message": "Blog deleted"}


# ─── Comments ────────────────────────────────────────────────────

@router.post("/{slug}/comments", status_code=status.HTTP_201_CREATED)
async def add_comment(
    slug: str,
    body: CommentCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    blog = await _blog_by_slug(db, slug)
    comment = BlogComment(
        blog_id=blog.id,
        name=body.name,
        email=body.email.lower(),
        comment=body.comment,
        country=await clients.geo.country_for(client_ip(request)),
    )
    db.add(comment)
    await touch(db, TimestampType.BLOG)
    await db.commit()
    await db.refresh(comment)
    return {"message": "Comment added", "comment": dump(CommentOut, comment)}


@router.get("/{slug}/comments")
async def list_comments(slug: str, db: AsyncSession = Depends(get_db)):
    blog = await _blog_by_slug(db, slug)
    result = await db.execute(
        select(BlogComment)
        .where(BlogComment.blog_id == blog.id)
        .order_by(BlogComment.created_at.desc())
    )
    return {"message": "Comments fetched", "comments": dump(CommentOut, list(result.scalars()))}
