"""
Minimal typed Python client for the Betfair Exchange API

Logs in with username, password and application key, then exposes the
read-only list* operations of the betting API. Results come back as pandas
DataFrames, except market books which are returned as decoded JSON.
"""

from .client import BetfairClient, connect
from .config import Endpoints, Credentials, credentials_from_env
from .envelope import build_request, normalize_market_projection
from .parse import check_response, flatten
from .types import (
    MarketFilter,
    TimeRange,
    PriceProjection,
    MarketProjection,
    MarketSort,
    MarketBettingType,
    OrderStatus,
    OrderProjection,
    MatchProjection,
    PriceData,
    Session,
    SessionSummary,
    build_filter,
)
from .errors import (
    BetfairAPIError,
    ValidationError,
    AuthError,
    NetworkError,
    ApiError,
    ParseError,
)

__version__ = "0.1.0"

__all__ = [
    "BetfairClient",
    "connect",
    "Endpoints",
    "Credentials",
    "credentials_from_env",
    "build_request",
    "normalize_market_projection",
    "check_response",
    "flatten",
    "MarketFilter",
    "TimeRange",
    "PriceProjection",
    "MarketProjection",
    "MarketSort",
    "MarketBettingType",
    "OrderStatus",
    "OrderProjection",
    "MatchProjection",
    "PriceData",
    "Session",
    "SessionSummary",
    "build_filter",
    "BetfairAPIError",
    "ValidationError",
    "AuthError",
    "NetworkError",
    "ApiError",
    "ParseError",
]
