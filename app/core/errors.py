from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """Referenced entity does not exist (404)."""

    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ForbiddenError(HTTPException):
    """Actor lacks ownership or role for the target entity (403)."""

    def __init__(self, detail: str = "Access denied"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class InvalidStateError(HTTPException):
    """
    Operation is not valid for the entity's current status (400).

    Covers: already paid, already processed, already delivered,
    order not pending, order not assigned, not refundable.
    """

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class InvalidInputError(HTTPException):
    """
    Request data is unusable (400).

    Covers: unknown/unavailable menu items, mixed-vendor carts,
    amount mismatch, unsupported status values.
    """

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NoFailedAttemptError(HTTPException):
    """Payment retry requested but no failed attempt exists (400)."""

    def __init__(self, detail: str = "No failed payment found to retry"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
