"""Business error taxonomy for the storefront.

Errors are identified by an ``ErrorKind`` rather than by exception subclass.
Each kind carries its machine-readable code and the HTTP status the API
layer answers with.
"""

from enum import Enum


class ErrorKind(Enum):
    INVALID_ADDRESS = ("INVALID_ADDRESS", 400)
    EMPTY_CART = ("EMPTY_CART", 400)
    PRODUCT_UNAVAILABLE = ("PRODUCT_UNAVAILABLE", 400)
    INSUFFICIENT_STOCK = ("INSUFFICIENT_STOCK", 400)
    NOT_FOUND = ("NOT_FOUND", 404)
    INVALID_STATUS = ("INVALID_STATUS", 400)
    FORBIDDEN = ("FORBIDDEN", 403)
    ACCOUNT_INACTIVE = ("ACCOUNT_INACTIVE", 403)

    def __init__(self, code: str, status_code: int) -> None:
        self.code = code
        self.status_code = status_code


_DEFAULT_MESSAGES = {
    ErrorKind.INVALID_ADDRESS: "Invalid address",
    ErrorKind.EMPTY_CART: "Cart is empty",
    ErrorKind.PRODUCT_UNAVAILABLE: "Product is unavailable",
    ErrorKind.INSUFFICIENT_STOCK: "Insufficient stock",
    ErrorKind.NOT_FOUND: "Not found",
    ErrorKind.INVALID_STATUS: "Operation not allowed in the current status",
    ErrorKind.FORBIDDEN: "Operation not permitted",
    ErrorKind.ACCOUNT_INACTIVE: "Account is not active",
}


class StorefrontError(Exception):
    """A business-rule failure. Raised before anything is committed."""

    def __init__(self, kind: ErrorKind, message: str | None = None, **context):
        self.kind = kind
        self.message = message or _DEFAULT_MESSAGES[kind]
        self.context = context
        super().__init__(self.message)

    @property
    def code(self) -> str:
        return self.kind.code

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    def __repr__(self) -> str:
        return f"StorefrontError({self.kind.name}, {self.message!r})"


class ConcurrencyConflict(Exception):
    """Concurrent writers kept colliding and the retry budget ran out."""

    def __init__(self, operation: str, attempts: int):
        self.operation = operation
        self.attempts = attempts
        super().__init__(f"{operation} conflicted with a concurrent update {attempts} times; giving up")
