"""
Custom exceptions for the Betfair Exchange API client
"""

from typing import Optional


class BetfairAPIError(Exception):
    """Base exception for all Betfair API client errors"""

    pass


class ValidationError(BetfairAPIError):
    """A filter or request option failed local checks"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class AuthError(BetfairAPIError):
    """Login failed, or no session is held"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class NetworkError(BetfairAPIError):
    """Connection failure or non-2xx response without an API error body"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ApiError(BetfairAPIError):
    """The exchange returned an error envelope"""

    def __init__(self, method: str, code: str, description: Optional[str] = None):
        super().__init__(f"{method}: {code}" + (f" ({description})" if description else ""))
        self.method = method
        self.code = code
        self.description = description


class ParseError(BetfairAPIError):
    """A result record is missing a field the flattener depends on"""

    def __init__(self, method: str, field: str, index: Optional[int] = None):
        where = f" in record {index}" if index is not None else ""
        super().__init__(f"{method}: missing field '{field}'{where}")
        self.method = method
        self.field = field
        self.index = index
