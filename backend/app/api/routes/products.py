"""Product Routes — the storefront catalogue.

Invariants:
    - Slug = 20 random characters + slugified name (never collides on equal names)
    - Public reads see available products only; an unavailable slug is 403
    - Images destroyed after the delete commits
"""

import json
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.core.domain_types import ProductStatus, TimestampType
from app.core.errors import (
    InvalidInputError, PermissionDeniedError, ResourceNotFoundError,
)
from app.core.listing_rules import parse_bool_field
from app.core.slugs import unique_product_slug
from app.infrastructure.clients import ExternalClients, get_clients
from app.infrastructure.database import get_db
from app.models.product import Product
from app.models.user import User
from app.schemas.common import dump
from app.schemas.storefront import ProductOut, ProductStatusUpdate
from app.services.lookups import get_or_404
from app.services.media_cleanup import destroy_quietly
from app.services.timestamps import touch

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/products", tags=["products"])


def _json_field(raw: str | None, field: str, expected: type):
    if not raw:
        return expected()
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        raise InvalidInputError(f"{field} must be valid JSON.", field=field)
    if not isinstance(value, expected):
        raise InvalidInputError(
            f"{field} must be a JSON {expected.__name__}.", field=field,
        )
    return value


async def _all_products(db: AsyncSession) -> list[dict]:
    result = await db.execute(select(Product).order_by(Product.created_at.desc()))
    return dump(ProductOut, list(result.scalars()))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    name: str = Form(..., min_length=1, max_length=300),
    sale_price: float = Form(..., ge=0),
    regular_price: float = Form(0.0, ge=0),
    quantity: int = Form(1, ge=0),
    in_stock: str | None = Form("true"),
    sale: str | None = Form(None),
    is_featured: str | None = Form(None),
    sizes: str | None = Form(None),
    description: str | None = Form(None),
    category: str | None = Form(None),
    sub_category: str | None = Form(None),
    images: list[UploadFile] | None = File(None),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    parsed_sizes = _json_field(sizes, "sizes", list)
    parsed_description = _json_field(description, "description", dict)
    uploaded = [
        await clients.media.upload(await f.read(), folder="products")
        for f in images or []
    ]
    product = Product(
        name=name,
        slug=unique_product_slug(name),
        regular_price=regular_price,
        sale_price=sale_price,
        quantity=quantity,
        in_stock=parse_bool_field(in_stock),
        sale=parse_bool_field(sale),
        is_featured=parse_bool_field(is_featured),
        sizes=parsed_sizes,
        description=parsed_description,
        category=category,
        sub_category=sub_category,
        images=uploaded,
    )
    db.add(product)
    await touch(db, TimestampType.PRODUCT)
    await db.commit()
    await db.refresh(product)
    logger.info("Product created", extra={"resource": product.slug})
    return {"message": "Product created successfully", "product": dump(ProductOut, product)}


@router.get("")
async def available_products(db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(Product)
        .where(Product.status == ProductStatus.AVAILABLE.value)
        .order_by(Product.created_at.desc())
    )
    return {"message": "Products fetched", "products": dump(ProductOut, list(result.scalars()))}


@router.get("/admin")
async def all_products(
    admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db),
):
    return {"message": "Products fetched", "products": await _all_products(db)}


@router.get("/{slug}")
async def read_product(slug: str, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Product).where(Product.slug == slug))
    product = result.scalar_one_or_none()
    if product is None:
        raise ResourceNotFoundError("Product", slug)
    if product.status != ProductStatus.AVAILABLE.value:
        raise PermissionDeniedError("This product is not available.")
    product.views += 1
    await db.commit()
    await db.refresh(product)
    return {"message": "Product fetched", "product": dump(ProductOut, product)}


@router.put("/{product_id}/status")
async def set_product_status(
    product_id: UUID,
    body: ProductStatusUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    product = await get_or_404(db, Product, product_id, "Product")
    product.status = body.status.value
    await touch(db, TimestampType.PRODUCT)
    await db.commit()
    await db.refresh(product)
    return {"message": "Product status updated", "product": dump(ProductOut, product)}


@router.delete("/{product_id}")
async def delete_product(
    product_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    product = await get_or_404(db, Product, product_id, "Product")
    public_ids = [img.get("public_id") for img in product.images or []]
    await db.delete(product)
    await touch(db, TimestampType.PRODUCT)
    await db.commit()
    for public_id in public_ids:
        await destroy_quietly(clients.media, public_id)
    logger.info("Product deleted", extra={"resource": str(product_id)})
    return {"message": "Product deleted", "products": await _all_products(db)}
