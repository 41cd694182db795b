# impostor/core/exceptions.py
from fastapi import status


class GameError(Exception):
    """
    Base class for every user-facing failure of a game operation.
    Raised before any state is written; the transaction helper rolls back regardless.
    """
    code: str = "game_error"
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {"detail": self.message, "error": self.code}


class NotFound(GameError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class Forbidden(GameError):
    code = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class InvalidState(GameError):
    code = "invalid_state"
    status_code = status.HTTP_409_CONFLICT


class PreconditionFailed(GameError):
    code = "precondition_failed"
    status_code = status.HTTP_400_BAD_REQUEST


class ModeMismatch(GameError):
    code = "mode_mismatch"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
