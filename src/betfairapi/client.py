"""
Main client for the Betfair Exchange API
"""

from threading import Lock
from typing import Any, Dict, Iterable, List, Optional, Union

import pandas as pd

from .config import Credentials, Endpoints
from .envelope import FilterLike, build_request, normalize_market_projection
from .errors import AuthError, ValidationError
from .http import HTTPClient
from .parse import check_response, flatten, result_of
from .types import (
    MarketSort,
    MatchProjection,
    OrderProjection,
    PriceProjection,
    Session,
    SessionSummary,
)

METHOD_NAMES = [
    "competitions",
    "countries",
    "event_types",
    "events",
    "login",
    "market_book",
    "market_catalogue",
    "market_types",
    "session",
    "venues",
]


class BetfairClient:
    """
    Client for the read-only parts of the Betfair betting API.

    Each query builds a JSON-RPC envelope, POSTs it with the current session
    token, raises on an API error and flattens the result into a DataFrame.
    The session is the only mutable state and is replaced by login().
    """

    def __init__(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        app_key: Optional[str] = None,
        *,
        credentials: Optional[Credentials] = None,
        endpoints: Optional[Endpoints] = None,
        timeout: float = 30,
    ):
        """
        Initialize the client, logging in when any credential is given

        Args:
            username: Betfair username
            password: Betfair password
            app_key: Application key from developer.betfair.com
            credentials: Credentials (e.g. from credentials_from_env()) used
                instead of the three arguments above
            endpoints: Login and API URLs (default: global exchange)
            timeout: Request timeout in seconds (default: 30)

        Raises:
            ValidationError: Some credentials given, others missing or empty
            AuthError: Login failed
        """
        if credentials is not None:
            username = credentials.username
            password = credentials.password
            app_key = credentials.app_key
        self.http = HTTPClient(endpoints, timeout)
        self._session: Optional[Session] = None
        self._lock = Lock()
        if any(v is not None for v in (username, password, app_key)):
            self.login(username, password, app_key)

    def __repr__(self) -> str:
        state = "logged in" if self._session is not None else "not logged in"
        return f"<BetfairClient ({state}) methods: {', '.join(self.methods())}>"

    @staticmethod
    def methods() -> List[str]:
        """Names of the available operations"""
        return list(METHOD_NAMES)

    # Session

    def login(self, username: str, password: str, app_key: str) -> SessionSummary:
        """
        Log in and replace the held session.

        A failed login raises AuthError and leaves any previous session in place.

        Raises:
            ValidationError: A credential is missing or empty (nothing is sent)
            AuthError: The exchange rejected the login
        """
        given = {"username": username, "password": password, "app_key": app_key}
        missing = [name for name, value in given.items() if not value]
        if missing:
            raise ValidationError(
                f"missing credential(s): {', '.join(missing)}", field=missing[0]
            )
        session = self.http.login(username, password, app_key)
        with self._lock:
            self._session = session
        return SessionSummary.from_session(session)

    def session(self) -> SessionSummary:
        """Token and login details of the current session (no network call)"""
        return SessionSummary.from_session(self._current_session())

    def _current_session(self) -> Session:
        with self._lock:
            session = self._session
        if session is None or not session.token:
            raise AuthError("Not logged in. Call login() first.")
        return session

    # Plumbing

    def _call(self, method: str, envelope: Dict[str, Any]) -> Any:
        session = self._current_session()
        response = self.http.post(envelope, session)
        check_response(response, method)
        return result_of(response, method)

    def _list(self, method: str, filter: FilterLike) -> pd.DataFrame:
        envelope = build_request(method, filter)
        return flatten(self._call(method, envelope), method)

    # Queries

    def competitions(self, filter: FilterLike = None) -> pd.DataFrame:
        """Competitions with current markets: id, name, marketCount, competitionRegion"""
        return self._list("competitions", filter)

    def countries(self, filter: FilterLike = None) -> pd.DataFrame:
        """Countries hosting events: countryCode, marketCount"""
        return self._list("countries", filter)

    def events(self, filter: FilterLike = None) -> pd.DataFrame:
        """Events: id, name, countryCode, timezone, venue, openDate, marketCount"""
        return self._list("events", filter)

    def event_types(self, filter: FilterLike = None) -> pd.DataFrame:
        """Event types, i.e. sports: id, name, marketCount"""
        return self._list("eventTypes", filter)

    def market_types(self, filter: FilterLike = None) -> pd.DataFrame:
        """Market types: marketType, marketCount"""
        return self._list("marketTypes", filter)

    def venues(self, filter: FilterLike = None) -> pd.DataFrame:
        """Venues hosting racing: venue, marketCount"""
        return self._list("venues", filter)

    def market_catalogue(
        self,
        filter: FilterLike = None,
        market_projection: Optional[Iterable[str]] = None,
        sort: Optional[Union[MarketSort, str]] = None,
        max_results: int = 1,
        keep_rules: bool = False,
    ) -> pd.DataFrame:
        """
        Get market catalogue entries

        Args:
            filter: MarketFilter, dict of filter options, or None
            market_projection: Sections to include, e.g. ['EVENT', 'RUNNER_DESCRIPTION'];
                case-insensitive, unknown values are dropped
            sort: MarketSort value
            max_results: Maximum markets to return (default: 1)
            keep_rules: Keep the rules text column (default: False)

        Returns:
            DataFrame with one row per market, or per runner when runners
            were requested

        Raises:
            AuthError: Not logged in
            ValidationError: Bad filter or option
            NetworkError: Transport failure
            ApiError: The exchange returned an error
            ParseError: A market record is missing required fields
        """
        projection = normalize_market_projection(market_projection)
        envelope = build_request(
            "marketCatalogue",
            filter,
            market_projection=projection,
            sort=sort,
            max_results=max_results,
        )
        result = self._call("marketCatalogue", envelope)
        return flatten(
            result, "marketCatalogue", market_projection=projection, keep_rules=keep_rules
        )

    def market_book(
        self,
        market_ids: Optional[List[str]] = None,
        price_projection: Optional[Union[PriceProjection, Dict[str, Any]]] = None,
        order_projection: Optional[Union[OrderProjection, str]] = None,
        match_projection: Optional[Union[MatchProjection, str]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Get dynamic market data: prices, status, traded volume and orders.

        The decoded result is returned as-is; price and order ladders do
        not fit a flat table.
        """
        envelope = build_request(
            "marketBook",
            market_ids=market_ids if market_ids is not None else [],
            price_projection=price_projection,
            order_projection=order_projection,
            match_projection=match_projection,
        )
        return self._call("marketBook", envelope)


def connect(
    username: Optional[str] = None,
    password: Optional[str] = None,
    app_key: Optional[str] = None,
    *,
    credentials: Optional[Credentials] = None,
    **kwargs,
) -> BetfairClient:
    """
    Factory function to create a logged-in client.

    Args:
        username: Betfair username
        password: Betfair password
        app_key: Application key
        credentials: Credentials, e.g. connect(credentials=credentials_from_env())
        **kwargs: Passed to BetfairClient (endpoints, timeout)

    Returns:
        Logged-in BetfairClient

    Raises:
        ValidationError: A credential is missing or empty
        AuthError: Login failed
    """
    if credentials is not None:
        username = credentials.username
        password = credentials.password
        app_key = credentials.app_key
    client = BetfairClient(**kwargs)
    client.login(username, password, app_key)
    return client
