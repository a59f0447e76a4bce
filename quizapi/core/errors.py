"""Error taxonomy shared by the repository, the scorer and the HTTP layer."""


class QuizError(Exception):
    """Base class for controlled failures; carries the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(QuizError):
    status_code = 400


class NotFoundError(QuizError):
    status_code = 404


class StorageError(QuizError):
    status_code = 500
