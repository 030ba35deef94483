"""
Domain errors raised by the services layer.

Routers translate these into HTTP responses. Each error carries the
identifiers the caller needs to explain the rejection; ``message`` is the
short human-readable reason shown to the client.
"""


class StoreError(Exception):
    """Base class for every business-rule or lookup failure."""

    def __init__(self, message):
        self.message = message
        super().__init__(message)


class SettlementError(StoreError):
    """Raised when a sale cannot be settled. Nothing has been applied."""


class NotFound(StoreError):
    """A referenced student or product does not exist."""


class StudentNotFound(NotFound, SettlementError):
    def __init__(self, student_ref):
        self.student_ref = student_ref
        super().__init__("Student not found")


class ProductNotFound(NotFound, SettlementError):
    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class InsufficientStock(SettlementError):
    def __init__(self, product_id, product_name, requested, available):
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__(f"Insufficient stock for {product_name}")


class InsufficientBalance(SettlementError):
    def __init__(self, student_id, required, available):
        self.student_id = student_id
        self.required = required
        self.available = available
        super().__init__("Insufficient balance")


class InvalidCart(SettlementError):
    """The cart failed a precondition (empty, bad quantity, bad price)."""


class PersistenceFailure(SettlementError):
    """The store failed while committing. The whole unit was rolled back.

    Also raised by the balance and stock paths, which commit the same way.
    """

    def __init__(self, message="Failed to process transaction"):
        super().__init__(message)


class InvalidStockChange(StoreError):
    def __init__(self, product_id, message):
        self.product_id = product_id
        super().__init__(message)


class InvalidBalanceAdjustment(StoreError):
    pass


class EditConflict(StoreError):
    """A catalog or profile edit collided with another write and was rolled back."""

    def __init__(self, message="Record was changed by another request, please retry"):
        super().__init__(message)
