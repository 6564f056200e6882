"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Ledger (income, expenses, balance, budgets)
  3xxx: Category
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

class EmailExistsError(AppError):
    def __init__(self, message: str = "Email already registered") -> None:
        super().__init__(1002, message, 409)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid email or password", 401)


class MissingTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Missing or invalid token", 401)


class InvalidAccessTokenError(AppError):
    def __init__(self, message: str = "invalid token") -> None:
        super().__init__(1005, message, 401)


class AccessTokenExpiredError(AppError):
    """Raised by the token service; the session resolver turns it into a refresh attempt."""

    def __init__(self) -> None:
        super().__init__(1006, "authorization token expired", 401)


class RefreshTokenMissingError(AppError):
    def __init__(self) -> None:
        super().__init__(1007, "authorization token expired and refresh token missing", 401)


class InvalidRefreshTokenError(AppError):
    """Base for every refresh-token rejection."""

    def __init__(self, code: int = 1008, message: str = "invalid or expired refresh token") -> None:
        super().__init__(code, message, 401)


class RefreshTokenNotFoundError(InvalidRefreshTokenError):
    def __init__(self) -> None:
        super().__init__(1008, "invalid or expired refresh token")


class RefreshTokenExpiredError(InvalidRefreshTokenError):
    def __init__(self) -> None:
        super().__init__(1009, "refresh token expired")


class RefreshTokenUsageExceededError(InvalidRefreshTokenError):
    def __init__(self) -> None:
        super().__init__(1010, "refresh token exceeded usage limit")


class RefreshPersistenceError(InvalidRefreshTokenError):
    def __init__(self) -> None:
        super().__init__(1011, "failed to update refresh token usage")


class SessionUserNotFoundError(AppError):
    def __init__(self) -> None:
        super().__init__(1012, "User not found", 401)


class UserNotFoundError(AppError):
    def __init__(self, user_id: int) -> None:
        super().__init__(1013, f"User not found: {user_id}", 404)


class IncorrectPasswordError(AppError):
    def __init__(self) -> None:
        super().__init__(1014, "Current password is incorrect", 401)


# --- 2xxx: Ledger ---

class EntryNotFoundError(AppError):
    def __init__(self, kind: str, entry_id: int) -> None:
        super().__init__(2001, f"{kind.capitalize()} not found: {entry_id}", 404)


class InvalidCategoryError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2002, detail, 400)


class BudgetExistsError(AppError):
    def __init__(self, category_id: int, month: str) -> None:
        super().__init__(2003, f"Budget already set for category {category_id} in {month}", 409)


class BudgetNotFoundError(AppError):
    def __init__(self, category_id: int) -> None:
        super().__init__(2004, f"Budget not found for category {category_id}", 404)


# --- 3xxx: Category ---

class CategoryNotFoundError(AppError):
    def __init__(self, category_id: int) -> None:
        super().__init__(3001, f"Category not found: {category_id}", 404)


class CategoryExistsError(AppError):
    def __init__(self, message: str = "Category already exists") -> None:
        super().__init__(3002, message, 409)


# --- 9xxx: System ---

class BadRequestError(AppError):
    def __init__(self, detail: str = "Invalid request") -> None:
        super().__init__(9003, detail, 400)


class TokenSigningError(AppError):
    def __init__(self) -> None:
        super().__init__(9004, "Failed to generate access token", 500)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
