# Services Package
from .ledger_service import LedgerService
from .order_service import OrderService
from .product_service import ProductService
from .user_service import UserService
from .upload_service import UploadService
from .audit_service import AuditService

__all__ = [
    "LedgerService",
    "OrderService",
    "ProductService",
    "UserService",
    "UploadService",
    "AuditService",
]
