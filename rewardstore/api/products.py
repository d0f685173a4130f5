"""
Catalog API - public product listing and admin product management
"""
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session
from typing import List, Optional

from rewardstore.core import get_db
from rewardstore.core.security import ActingUser
from rewardstore.schemas.product import ProductCreate, ProductUpdate, ProductResponse
from rewardstore.services import ProductService, UploadService
from .auth import get_optional_actor, get_admin_actor

router = APIRouter(prefix="/products", tags=["products"])
admin_router = APIRouter(prefix="/admin/products", tags=["admin"])

PRODUCT_IMAGE_DIR = "products"


@router.get("", response_model=List[ProductResponse])
async def list_products(
    actor: Optional[ActingUser] = Depends(get_optional_actor),
    db: Session = Depends(get_db)
):
    """Active products for everyone, all products for admins"""
    return ProductService.list_products(db, actor)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: int,
    actor: Optional[ActingUser] = Depends(get_optional_actor),
    db: Session = Depends(get_db)
):
    return ProductService.get_product(db, product_id, actor)


@admin_router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    name: str = Form(...),
    points_cost: int = Form(...),
    stock: int = Form(0),
    description: Optional[str] = Form(None),
    is_active: bool = Form(True),
    image: Optional[UploadFile] = File(None),
    actor: ActingUser = Depends(get_admin_actor),
    db: Session = Depends(get_db)
):
    """Create a product from a multipart form, with an optional image"""
    product_data = ProductCreate(
        name=name,
        description=description,
        points_cost=points_cost,
        stock=stock,
        is_active=is_active,
    )
    if image is not None and image.filename:
        product_data.image_url = UploadService.save_image(image, PRODUCT_IMAGE_DIR, "image")
    try:
        return ProductService.create_product(db, actor, product_data)
    except Exception:
        UploadService.delete_image(product_data.image_url)
        raise


@admin_router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    name: Optional[str] = Form(None),
    points_cost: Optional[int] = Form(None),
    stock: Optional[int] = Form(None),
    description: Optional[str] = Form(None),
    is_active: Optional[bool] = Form(None),
    image: Optional[UploadFile] = File(None),
    actor: ActingUser = Depends(get_admin_actor),
    db: Session = Depends(get_db)
):
    """Update the supplied product fields; a new image replaces the old one"""
    fields = {
        "name": name,
        "points_cost": points_cost,
        "stock": stock,
        "description": description,
        "is_active": is_active,
    }
    product_data = ProductUpdate(**{k: v for k, v in fields.items() if v is not None})

    # Fail on a missing product before storing an upload for it
    ProductService.get_product(db, product_id, actor)
    if image is not None and image.filename:
        product_data.image_url = UploadService.save_image(image, PRODUCT_IMAGE_DIR, "image")
    try:
        return ProductService.update_product(db, actor, product_id, product_data)
    except Exception:
        UploadService.delete_image(product_data.image_url)
        raise


@admin_router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    actor: ActingUser = Depends(get_admin_actor),
    db: Session = Depends(get_db)
):
    """Delete a product, or deactivate it when orders reference it"""
    return ProductService.delete_product(db, actor, product_id)
