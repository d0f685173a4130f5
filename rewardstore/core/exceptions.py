"""
Domain Errors

Services raise these; the handlers registered in main.py turn them into
JSON responses of the form {"message", "code", "error_id", **detail}.
"""
from typing import Any, Dict, List, Optional


class RewardStoreError(Exception):
    """Base error carrying an HTTP status and a structured detail payload"""
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, **detail: Any):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "code": self.code, **self.detail}


# ============== 404 ==============

class NotFoundError(RewardStoreError):
    status_code = 404
    code = "not_found"
    entity = "Record"

    def __init__(self, entity_id: Any = None, message: Optional[str] = None):
        super().__init__(
            message or f"{self.entity} {entity_id} not found",
            entity=self.entity.lower(),
            entity_id=entity_id,
        )


class UserNotFoundError(NotFoundError):
    entity = "User"


class ProductNotFoundError(NotFoundError):
    entity = "Product"


class OrderNotFoundError(NotFoundError):
    entity = "Order"


# ============== 401 / 403 ==============

class NotAuthenticatedError(RewardStoreError):
    status_code = 401
    code = "not_authenticated"

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class ForbiddenError(RewardStoreError):
    status_code = 403
    code = "forbidden"

    def __init__(self, message: str = "Only administrators can perform this action"):
        super().__init__(message)


# ============== 400 ==============

class ValidationFailedError(RewardStoreError):
    status_code = 400
    code = "validation_failed"

    def __init__(self, message: str = "Invalid data provided", errors: Optional[List[dict]] = None):
        super().__init__(message, errors=errors or [])


# ============== 422 ==============

class BusinessRuleError(RewardStoreError):
    status_code = 422
    code = "business_rule"


class ProductUnavailableError(BusinessRuleError):
    code = "product_unavailable"

    def __init__(self, product_id: int, product_name: str):
        super().__init__(
            f"Product {product_name} is not available",
            product_id=product_id,
            product_name=product_name,
        )


class InsufficientStockError(BusinessRuleError):
    code = "insufficient_stock"

    def __init__(self, product_id: int, product_name: str, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for {product_name}",
            product_id=product_id,
            product_name=product_name,
            available=available,
            requested=requested,
        )


class InsufficientPointsError(BusinessRuleError):
    code = "insufficient_points"

    def __init__(self, user_points: int, required_points: int):
        super().__init__(
            "Insufficient points",
            user_points=user_points,
            required_points=required_points,
            shortfall=required_points - user_points,
        )


class InvalidStatusTransitionError(BusinessRuleError):
    code = "invalid_status_transition"

    def __init__(self, order_id: int, current_status: str, new_status: str):
        super().__init__(
            f"Cannot transition order {order_id} from {current_status} to {new_status}",
            order_id=order_id,
            current_status=current_status,
            new_status=new_status,
        )


# ============== 409 ==============

class ConflictError(RewardStoreError):
    status_code = 409
    code = "conflict"

    def __init__(self, message: str = "A concurrent update changed the data, please retry"):
        super().__init__(message, retryable=True)


class DuplicateUsernameError(RewardStoreError):
    status_code = 409
    code = "duplicate_username"

    def __init__(self, username: str):
        super().__init__(f"Username {username} already exists", username=username)
