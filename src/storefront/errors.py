"""Custom exceptions for storefront."""


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    pass


class CheckoutValidationError(StorefrontError):
    """Raised when checkout input fails the form schema."""

    def __init__(self, field_errors: dict[str, str]):
        self.field_errors = field_errors
        fields = ", ".join(sorted(field_errors))
        super().__init__(f"Invalid checkout input: {fields}")


class ProductNotFoundError(StorefrontError):
    """Raised when the catalog has no product with the given ID."""

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class OrderNotFoundError(StorefrontError):
    """Raised when an order ID doesn't exist."""

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order not found: {order_id}")


class DuplicateOrderError(StorefrontError):
    """Raised when an order ID is already present in the history."""

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order already recorded: {order_id}")


class InvalidStatusTransitionError(StorefrontError):
    """Raised when an order status change is not allowed."""

    def __init__(self, order_id: str, current: str, requested: str):
        self.order_id = order_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot move order {order_id} from '{current}' to '{requested}'"
        )


class EmptyCartError(StorefrontError):
    """Raised when checkout is attempted with an empty cart."""

    def __init__(self):
        super().__init__("Cart is empty. Add items before checking out.")


class PaymentDeclinedError(StorefrontError):
    """Raised when the payment step rejects the charge."""

    def __init__(self, reason: str | None = None):
        self.reason = reason
        msg = "Payment declined"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class CheckoutInProgressError(StorefrontError):
    """Raised when a checkout attempt is submitted while already processing."""

    def __init__(self, attempt_key: str):
        self.attempt_key = attempt_key
        super().__init__(f"Checkout {attempt_key} is already processing")


class CheckoutCancelledError(StorefrontError):
    """Raised when a checkout attempt is cancelled before the order is placed."""

    def __init__(self, attempt_key: str):
        self.attempt_key = attempt_key
        super().__init__(f"Checkout {attempt_key} was cancelled")


class PersistenceError(StorefrontError):
    """Raised when a persisted record can't be read or written."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Storage failure at {path}: {reason}")


class InvalidSchemaVersionError(StorefrontError):
    """Raised when a persisted record has an unsupported schema version."""

    def __init__(self, found: int, supported: int):
        self.found = found
        self.supported = supported
        super().__init__(
            f"Unsupported schema version {found}. This tool supports version {supported}."
        )


class CatalogError(StorefrontError):
    """Raised when the remote catalog can't be reached or answers badly."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Catalog request failed: {url}\n{reason}")
