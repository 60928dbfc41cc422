# diary_app/exceptions.py

class DiaryError(Exception):
    """Base class for errors raised by the billing core and services."""


class ValidationError(DiaryError):
    """Rejected input. Nothing has been written when this is raised."""


class NotFoundError(DiaryError):
    pass
