"""
Registration error taxonomy.

Every error is an HTTPException whose detail is a dict with a stable `code`,
a human-readable `message` and the context fields a client needs to correct
the request. Validation errors (4xx) mean "fix your input"; the persistence
error (503) means "try again later".
"""

from typing import Any

from fastapi import HTTPException, status


class RegistrationError(HTTPException):
    code = "REGISTRATION_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.context = context
        super().__init__(
            status_code=type(self).status_code,
            detail={"code": self.code, "message": message, **context},
        )


class NotFoundError(RegistrationError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(f"{resource} not found", resource=resource, id=resource_id)


class InvalidSelectionError(RegistrationError):
    code = "INVALID_SELECTION"


class EmptySelectionError(RegistrationError):
    code = "EMPTY_SELECTION"

    def __init__(self):
        super().__init__("Registration must include at least one product in one session")


class CapacityExceededError(RegistrationError):
    code = "CAPACITY_EXCEEDED"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, session_id: int, session_name: str, available_spots: int, requested: int):
        super().__init__(
            f'Session "{session_name}" is full or would exceed capacity. '
            f"Available spots: {max(available_spots, 0)}, trying to register: {requested}",
            session_id=session_id,
            session_name=session_name,
            available_spots=max(available_spots, 0),
            requested=requested,
        )


class DineInMismatchError(RegistrationError):
    code = "DINE_IN_MISMATCH"

    def __init__(self, session_id: int, category: str, required: int, selected: int):
        super().__init__(
            f"For dine-in meals, you must select exactly {required} {category.lower()} meal(s) "
            f"per session. Currently selected: {selected} for {category} in session {session_id}.",
            session_id=session_id,
            category=category,
            required=required,
            selected=selected,
        )


class FoodOptOutViolationError(RegistrationError):
    code = "FOOD_OPT_OUT_VIOLATION"

    def __init__(self, session_id: int):
        super().__init__(
            "Cannot select food products when opted out of food for a session",
            session_id=session_id,
        )


class RegistrationConflictError(RegistrationError):
    code = "REGISTRATION_CONFLICT"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, session_id: int):
        super().__init__(
            "Registration failed due to high demand. Please try again.",
            session_id=session_id,
        )


class OrderPersistenceError(RegistrationError):
    code = "PERSISTENCE_ERROR"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self):
        super().__init__("The order could not be saved. Please try again later.")
