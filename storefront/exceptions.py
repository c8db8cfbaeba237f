"""Error taxonomy of the order placement engine.

Every error carries an HTTP status code and a machine-readable ``code`` so
the API layer can render it without knowing the individual classes.
"""
from typing import Any, Dict, Iterable, List


class StorefrontError(Exception):
    status_code = 400
    code = "storefront_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def details(self) -> Dict[str, Any]:
        return {}


class ValidationError(StorefrontError):
    """Malformed placement input, rejected before a transaction opens."""

    code = "validation_error"


class NotFoundError(StorefrontError):
    status_code = 404
    code = "product_not_found"

    def __init__(self, missing_ids: Iterable[int]):
        self.missing_ids: List[int] = list(missing_ids)
        ids = ", ".join(str(i) for i in self.missing_ids)
        super().__init__(f"Products with ID {ids} not found")

    def details(self):
        return {"missing_product_ids": self.missing_ids}


class InsufficientStockError(StorefrontError):
    code = "insufficient_stock"

    def __init__(self, product_id: int, available: int, requested: int, name: str = None):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        label = f'"{name}"' if name else f"#{product_id}"

        if self.out_of_stock:
            message = f"Product {label} is out of stock"
        else:
            message = (
                f"Not enough of product {label}. "
                f"Available: {available}, requested: {requested}"
            )
        super().__init__(message)

    @property
    def out_of_stock(self) -> bool:
        return self.available <= 0

    def details(self):
        return {
            "product_id": self.product_id,
            "available": self.available,
            "requested": self.requested,
            "out_of_stock": self.out_of_stock,
        }


class ConflictError(StorefrontError):
    """Lost a concurrency race; retry the whole placement from validation."""

    status_code = 409
    code = "conflict"
    retryable = True


class OrderNumberConflictError(ConflictError):
    code = "order_number_conflict"


class PersistenceError(StorefrontError):
    status_code = 503
    code = "persistence_error"
    retryable = True

    def __init__(self, message: str, order_number: str = None):
        super().__init__(message)
        # set when the order was committed but could not be read back
        self.order_number = order_number

    def details(self):
        if self.order_number:
            return {"order_number": self.order_number}
        return {}


class OrderNotFoundError(StorefrontError):
    status_code = 404
    code = "order_not_found"

    def __init__(self, reference):
        self.reference = reference
        super().__init__(f"Order {reference} not found")


class InvalidStatusTransitionError(StorefrontError):
    code = "invalid_status_transition"

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move order from '{current}' to '{requested}'")

    def details(self):
        return {"current_status": self.current, "requested_status": self.requested}
