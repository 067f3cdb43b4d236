class AppError(Exception):
    """Base app error."""


class ValidationError(AppError):
    pass


class NotFoundError(AppError):
    pass


class ProductNotFoundError(NotFoundError):
    pass


class DuplicateKeyError(AppError):
    pass


class InsufficientStockError(AppError):
    pass


class ConflictError(AppError):
    """Stock changed under us more times than we are willing to retry."""


class UpstreamError(AppError):
    """The remote products API failed or answered something unusable."""
