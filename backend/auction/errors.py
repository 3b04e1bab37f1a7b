"""Domain errors raised by services and mapped to HTTP responses.

Each error carries the status code it should be reported with, so
controllers do not need to translate them one by one.
"""


class AuctionError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(AuctionError):
    status_code = 400


class UnauthorizedError(AuctionError):
    status_code = 401


class ForbiddenError(AuctionError):
    status_code = 403


class NotFoundError(AuctionError):
    status_code = 404


class RateLimitedError(AuctionError):
    status_code = 429

    def __init__(self, message: str, retry_after: int):
        super().__init__(message)
        self.retry_after = retry_after
