"""
JSON-RPC request envelopes for the Betfair betting API
"""

from typing import Any, Dict, Iterable, List, Optional, Union

from .errors import ValidationError
from .types import (
    MarketFilter,
    MarketProjection,
    MarketSort,
    MatchProjection,
    OrderProjection,
    PriceProjection,
    build_filter,
    coerce_enum,
)

API_PREFIX = "SportsAPING/v1.0/"

# Facade name -> API operation name
METHODS = {
    "competitions": "listCompetitions",
    "countries": "listCountries",
    "events": "listEvents",
    "eventTypes": "listEventTypes",
    "marketBook": "listMarketBook",
    "marketCatalogue": "listMarketCatalogue",
    "marketTypes": "listMarketTypes",
    "venues": "listVenues",
}

# Facade name -> extras it accepts (python name -> wire name)
EXTRAS = {
    "marketCatalogue": {
        "market_projection": "marketProjection",
        "sort": "sort",
        "max_results": "maxResults",
    },
    "marketBook": {
        "market_ids": "marketIds",
        "price_projection": "priceProjection",
        "order_projection": "orderProjection",
        "match_projection": "matchProjection",
    },
}

ALLOWED_MARKET_PROJECTIONS = [p.value for p in MarketProjection]

FilterLike = Union[MarketFilter, Dict[str, Any], None]


def canonical_method(method: str) -> str:
    """Map ``event_types`` / ``listEventTypes`` style names onto ``eventTypes``"""
    if method in METHODS:
        return method
    for name, api_name in METHODS.items():
        if method == api_name or method == _snake(name):
            return name
    raise ValidationError(f"unsupported method: {method!r}", field="method")


def _snake(name: str) -> str:
    return "".join("_" + c.lower() if c.isupper() else c for c in name)


def normalize_market_projection(values: Optional[Iterable[Any]]) -> List[str]:
    """
    Uppercase each value and keep those in the allowed projection set.

    Unrecognised values are dropped without error. Input order is kept and
    repeats collapse to the first occurrence.
    """
    if values is None:
        return []
    if isinstance(values, (str, MarketProjection)):
        values = [values]
    kept: List[str] = []
    for value in values:
        text = value.value if isinstance(value, MarketProjection) else str(value)
        text = text.upper()
        if text in ALLOWED_MARKET_PROJECTIONS and text not in kept:
            kept.append(text)
    return kept


def filter_to_dict(filter: FilterLike) -> Dict[str, Any]:
    if filter is None:
        return {}
    if isinstance(filter, MarketFilter):
        return filter.to_dict()
    if isinstance(filter, dict):
        return build_filter(**filter).to_dict()
    raise ValidationError(
        f"filter: expected MarketFilter or dict, got {type(filter).__name__}",
        field="filter",
    )


def _market_catalogue_params(extras: Dict[str, Any]) -> Dict[str, Any]:
    params: Dict[str, Any] = {}
    projection = normalize_market_projection(extras.get("market_projection"))
    if projection:
        params["marketProjection"] = projection
    if extras.get("sort") is not None:
        params["sort"] = coerce_enum(MarketSort, extras["sort"], "sort").value
    max_results = extras.get("max_results")
    if max_results is not None:
        if isinstance(max_results, bool) or not isinstance(max_results, int) or max_results < 1:
            raise ValidationError(
                "max_results: expected a positive integer", field="max_results"
            )
        params["maxResults"] = max_results
    return params


def _market_book_params(extras: Dict[str, Any]) -> Dict[str, Any]:
    params: Dict[str, Any] = {}
    if extras.get("market_ids") is not None:
        # reuse the filter's id validation
        params["marketIds"] = MarketFilter(market_ids=extras["market_ids"]).market_ids
    price_projection = extras.get("price_projection")
    if price_projection is not None:
        if isinstance(price_projection, PriceProjection):
            params["priceProjection"] = price_projection.to_dict()
        elif isinstance(price_projection, dict):
            params["priceProjection"] = price_projection
        else:
            raise ValidationError(
                "price_projection: expected PriceProjection or dict",
                field="price_projection",
            )
    if extras.get("order_projection") is not None:
        params["orderProjection"] = coerce_enum(
            OrderProjection, extras["order_projection"], "order_projection"
        ).value
    if extras.get("match_projection") is not None:
        params["matchProjection"] = coerce_enum(
            MatchProjection, extras["match_projection"], "match_projection"
        ).value
    return params


def build_request(method: str, filter: FilterLike = None, **extras) -> Dict[str, Any]:
    """
    Build the JSON-RPC envelope for a betting API call.

    Args:
        method: Facade method name, e.g. 'competitions' or 'marketCatalogue'
        filter: MarketFilter, dict of build_filter options, or None
        **extras: Method-specific parameters (see EXTRAS)

    Returns:
        Envelope dict ready to be JSON-encoded

    Raises:
        ValidationError: Unknown method, illegal extra, or bad value
    """
    method = canonical_method(method)
    legal = EXTRAS.get(method, {})
    illegal = sorted(set(extras) - set(legal))
    if illegal:
        raise ValidationError(
            f"{method} does not accept: {', '.join(illegal)}", field=illegal[0]
        )

    if method == "marketBook":
        # listMarketBook selects by marketIds, never by filter
        if filter_to_dict(filter):
            raise ValidationError("marketBook does not accept a filter", field="filter")
        params: Dict[str, Any] = {"filter": {}}
        params.update(_market_book_params(extras))
    else:
        params = {"filter": filter_to_dict(filter)}
        if method == "marketCatalogue":
            params.update(_market_catalogue_params(extras))

    return {
        "jsonrpc": "2.0",
        "method": API_PREFIX + METHODS[method],
        "params": params,
        "id": 1,
    }
