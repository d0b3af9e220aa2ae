"""Error taxonomy of the orders domain.

Views map these by type: ``InvalidRequest`` to 400, ``NotFound`` to 404
and anything else to a generic 500.
"""


class OrderError(Exception):
    """Base class for errors raised by the orders domain.

    Attributes:
        code: Short machine-readable error code returned as ``detail``.
        message: Human readable description.
    """

    code = "ORDER_ERROR"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class InvalidRequest(OrderError):
    code = "INVALID_REQUEST"


class InsufficientStock(InvalidRequest):
    """Raised when a product cannot cover the requested quantity."""

    code = "INSUFFICIENT_STOCK"

    def __init__(self, product_name: str, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for product {product_name}. "
            f"Available: {available}, Requested: {requested}"
        )
        self.product_name = product_name
        self.available = available
        self.requested = requested


class NotFound(OrderError):
    """Raised when a product or an order does not exist.

    Attributes:
        resource: Name of the missing resource ("Product", "Order").
        id: Identifier that was looked up.
    """

    code = "NOT_FOUND"

    def __init__(self, resource: str, id):
        super().__init__(f"{resource} with ID {id} not found")
        self.resource = resource
        self.id = id


class DuplicateOrderNumber(OrderError):
    """The generated order number is already taken."""

    code = "DUPLICATE_ORDER_NUMBER"

    def __init__(self, order_number: str):
        super().__init__(f"Order number {order_number} already exists")
        self.order_number = order_number
