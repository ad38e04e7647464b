"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  3xxx: Listing
  4xxx: Boost order
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/User ---

class UsernameExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Username already exists", 409)


class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Email already exists", 409)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid username or password", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired", 401)


# --- 3xxx: Listing ---

class ListingNotFoundError(AppError):
    def __init__(self, listing_id: int) -> None:
        super().__init__(3001, f"Listing not found: {listing_id}", 404)


class BoostForbiddenError(AppError):
    def __init__(self) -> None:
        super().__init__(3002, "You can only boost your own listings", 403)


class ListingNotOwnedError(AppError):
    def __init__(self, listing_id: int) -> None:
        super().__init__(3003, f"Listing {listing_id} belongs to another seller", 403)


# --- 4xxx: Boost order ---

class BoostOrderNotFoundError(AppError):
    def __init__(self, order_id: str) -> None:
        super().__init__(4001, f"Boost order not found: {order_id}", 404)


class ListingAlreadyBoostedError(AppError):
    def __init__(self, listing_id: int) -> None:
        super().__init__(4002, f"Listing {listing_id} is already actively boosted", 409)


class BoostAlreadyPendingError(AppError):
    def __init__(self, listing_id: int) -> None:
        super().__init__(
            4003,
            f"Boost already requested for listing {listing_id}, awaiting payment",
            409,
        )


class InvalidOrderStateError(AppError):
    def __init__(self, order_id: str, status: str, expected: str = "pending") -> None:
        super().__init__(
            4004,
            f"Order {order_id} is {status}, expected {expected}",
            409,
        )


class PaymentFailedError(AppError):
    def __init__(self, order_id: str) -> None:
        super().__init__(4005, f"Payment failed for order {order_id}, please retry", 502)


class PaymentTimeoutError(AppError):
    def __init__(self, order_id: str) -> None:
        super().__init__(4006, f"Payment timed out for order {order_id}, please retry", 504)


class BoostNotClosedError(AppError):
    def __init__(self, listing_id: int) -> None:
        super().__init__(
            4007,
            f"Previous boost on listing {listing_id} has ended but is not closed yet, please retry",
            409,
        )


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class AdminRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(9003, "Administrator privileges required", 403)


class ValidationFailedError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9004, f"Validation failed: {detail}", 400)


# Framework-raised HTTPExceptions (auth dependency, unknown route, wrong method)
# carry no AppError code; these are the codes they are enveloped with.
HTTP_STATUS_ERROR_CODES: dict[int, int] = {
    401: 1003,
    403: 9003,
    404: 9001,
    405: 9005,
}
GENERIC_HTTP_ERROR_CODE = 9000
