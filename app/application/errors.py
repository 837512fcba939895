"""
Application layer errors.

Raised by use cases before the domain service is reached; all of them
mean the request itself was unusable and map to 400 InvalidRequest.
"""


class InvalidRequestError(Exception):
    """Base exception for unusable requests"""
    pass


class InvalidRequestContextError(InvalidRequestError):
    """Raised when the per-request context is missing or malformed"""

    def __init__(self, detail: str = "request context missing"):
        self.detail = detail
        super().__init__(detail)


class InvalidSearchParamsError(InvalidRequestError):
    """Raised when a search use case gets no (or unusable) search parameters"""

    def __init__(self, detail: str = "search parameters missing"):
        self.detail = detail
        super().__init__(detail)


class MissingIdentifierError(InvalidRequestError):
    """Raised when PUT/PATCH bodies carry no id"""

    def __init__(self, entity: str):
        self.entity = entity
        super().__init__(f"{entity} id is required")
