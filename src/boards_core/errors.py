# boards_core/errors.py


class BoardsError(Exception):
    """Base class for every error raised by the boards core."""


class NotFoundError(BoardsError):
    """A board, block, member or user does not exist, or the user has no
    membership of any kind on the board."""

    def __init__(self, entity: str):
        self.entity = entity
        super().__init__(f"{entity} not found")


class BadRequestError(BoardsError):
    """The request is structurally invalid. Raised before any write."""


class SizeLimitExceededError(BadRequestError):
    """A title or field payload is larger than the storage limit."""
