"""Error taxonomy for the market service.

Every error carries the HTTP status it maps to and a client-facing message;
``app.main`` renders them as ``{"error": message}``.
"""


class MarketError(Exception):
    status_code = 500
    message = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


class ValidationError(MarketError):
    status_code = 400
    message = "Invalid request"


class EmptyCart(ValidationError):
    message = "Cart is empty or malformed"


class NoValidItems(ValidationError):
    message = "None of the cart items exist in the catalog"


class InvalidStatus(ValidationError):
    message = "Unsupported status"


class CodeNotRequested(ValidationError):
    message = "No verification code was requested"


class CodeExpired(ValidationError):
    message = "Verification code has expired"


class CodeMismatch(ValidationError):
    message = "Verification code does not match"


class Unauthorized(MarketError):
    status_code = 401
    message = "Unauthorized"


class NotFound(MarketError):
    status_code = 404
    message = "Not found"


class OrderNotFound(NotFound):
    message = "Order not found"


class UserNotFound(NotFound):
    message = "User not found"


class SellerNotFound(NotFound):
    message = "Seller not found"


class Conflict(MarketError):
    status_code = 409
    message = "Conflict"


class ConfigurationError(MarketError):
    message = "Server is not configured"


class UpstreamFailure(MarketError):
    message = "Upstream service failed"


class PaymentLinkMissing(UpstreamFailure):
    message = "Payment provider did not return a payment link"


class InternalError(MarketError):
    pass


class OrderIdExhausted(InternalError):
    message = "Could not allocate an order id"
