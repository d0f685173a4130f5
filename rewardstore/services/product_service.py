"""
Product Service - Business Logic for the Catalog
"""
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from rewardstore.core.exceptions import ProductNotFoundError
from rewardstore.core.security import ActingUser, require_admin, is_admin
from rewardstore.models import Product, OrderItem
from rewardstore.schemas.product import ProductCreate, ProductUpdate
from .audit_service import AuditService
from .unit_of_work import unit_of_work
from .upload_service import UploadService

logger = logging.getLogger(__name__)

class ProductService:
    """Catalog business logic"""

    @staticmethod
    def list_products(db: Session, actor: Optional[ActingUser] = None) -> List[Product]:
        """Admins see every product, everyone else only active ones"""
        if is_admin(actor):
            return db.query(Product).order_by(Product.created_at.desc(), Product.id.desc()).all()

        return db.query(Product)\
            .filter(Product.is_active == True)\
            .order_by(Product.points_cost.asc(), Product.id)\
            .all()

    @staticmethod
    def get_product(db: Session, product_id: int, actor: Optional[ActingUser] = None) -> Product:
        """Get product by ID; inactive products are hidden from non-admins"""
        product = db.query(Product).filter(Product.id == product_id).first()
        if not product or (not product.is_active and not is_admin(actor)):
            raise ProductNotFoundError(product_id)
        return product

    @staticmethod
    def create_product(db: Session, actor: ActingUser, product_data: ProductCreate) -> Product:
        """Create new product"""
        require_admin(actor)
        product = Product(**product_data.model_dump())

        with unit_of_work(db):
            db.add(product)

        db.refresh(product)
        logger.info(f"Product {product.id} '{product.name}' created by admin {actor.id}")
        return product

    @staticmethod
    def update_product(
        db: Session,
        actor: ActingUser,
        product_id: int,
        product_data: ProductUpdate
    ) -> Product:
        """
        Update product fields.

        Price changes only affect future orders; existing order lines keep
        their own points_cost.
        """
        require_admin(actor)
        changes = product_data.model_dump(exclude_unset=True)

        with unit_of_work(db):
            product = db.query(Product).filter(Product.id == product_id).with_for_update().first()
            if not product:
                raise ProductNotFoundError(product_id)
            old_image = product.image_url
            for field, value in changes.items():
                setattr(product, field, value)

        if "image_url" in changes and old_image and old_image != product.image_url:
            UploadService.delete_image(old_image)

        db.refresh(product)
        return product

    @staticmethod
    def has_order_history(db: Session, product_id: int) -> bool:
        return db.query(OrderItem.id).filter(OrderItem.product_id == product_id).first() is not None

    @staticmethod
    def delete_product(db: Session, actor: ActingUser, product_id: int) -> dict:
        """
        Delete a product.

        Products referenced by order lines are deactivated instead, so order
        history never points at a missing product.
        """
        require_admin(actor)

        with unit_of_work(db):
            product = db.query(Product).filter(Product.id == product_id).with_for_update().first()
            if not product:
                raise ProductNotFoundError(product_id)

            image_url = product.image_url
            before = {"name": product.name, "stock": product.stock, "is_active": product.is_active}
            if ProductService.has_order_history(db, product_id):
                product.is_active = False
                action, deleted = "DEACTIVATE", False
            else:
                db.delete(product)
                action, deleted = "DELETE", True

            AuditService.record(
                db,
                table_name="product",
                record_id=product_id,
                action=action,
                performed_by=actor.id,
                before_data=before
            )

        if deleted:
            UploadService.delete_image(image_url)
            logger.info(f"Product {product_id} deleted by admin {actor.id}")
            return {"message": "Product deleted", "deleted": True, "deactivated": False}

        logger.info(f"Product {product_id} has order history, deactivated by admin {actor.id}")
        return {"message": "Product has order history and was deactivated", "deleted": False, "deactivated": True}
