"""
Response checking and flattening into pandas tables
"""

from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from .errors import ApiError, ParseError

# Simple list methods: (entity key, entity is an object to promote)
SIMPLE_SHAPES = {
    "competitions": ("competition", True),
    "events": ("event", True),
    "eventTypes": ("eventType", True),
    "countries": ("countryCode", False),
    "marketTypes": ("marketType", False),
    "venues": ("venue", False),
}

# Catalogue sections and the projection that asks for them
CATALOGUE_SECTIONS = {
    "competition": "COMPETITION",
    "event": "EVENT",
    "eventType": "EVENT_TYPE",
}


def check_response(response: Dict[str, Any], method: str) -> Dict[str, Any]:
    """
    Raise ApiError if the response carries an error object.

    Betfair nests the useful code under error.data.APINGException; plain
    JSON-RPC errors only have error.code and error.message.
    """
    error = response.get("error") if isinstance(response, dict) else None
    if not error:
        return response

    if not isinstance(error, dict):
        raise ApiError(method, str(error))

    data = error.get("data") or {}
    exception = data.get("APINGException") if isinstance(data, dict) else None
    if isinstance(exception, dict) and exception.get("errorCode"):
        code = exception["errorCode"]
        description = exception.get("errorDetails") or error.get("message")
    else:
        code = error.get("code", "UNKNOWN")
        description = error.get("message")
    raise ApiError(method, str(code), description)


def result_of(response: Dict[str, Any], method: str) -> Any:
    """Return response['result'], raising ParseError if it is absent"""
    if not isinstance(response, dict) or "result" not in response:
        raise ParseError(method, "result")
    return response["result"]


def _promote(obj: Dict[str, Any], prefix: str = "", row: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Copy obj into row, nested objects becoming dotted column names"""
    if row is None:
        row = {}
    for key, value in obj.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict):
            _promote(value, f"{name}.", row)
        else:
            row[name] = value
    return row


def _require(record: Any, field: str, method: str, index: int) -> Any:
    if not isinstance(record, dict) or field not in record:
        raise ParseError(method, field, index)
    return record[field]


def _records(result: Any, method: str) -> List[Any]:
    if not isinstance(result, list):
        raise ParseError(method, "result")
    return result


def _flatten_simple(records: List[Any], method: str) -> List[Dict[str, Any]]:
    entity_key, is_object = SIMPLE_SHAPES[method]
    rows = []
    for i, record in enumerate(records):
        entity = _require(record, entity_key, method, i)
        _require(record, "marketCount", method, i)
        if is_object:
            if not isinstance(entity, dict):
                raise ParseError(method, entity_key, i)
            row = _promote(entity)
        else:
            row = {entity_key: entity}
        for key, value in record.items():
            if key == entity_key:
                continue
            if isinstance(value, dict):
                _promote(value, f"{key}.", row)
            else:
                row[key] = value
        rows.append(row)
    return rows


def _flatten_catalogue(
    records: List[Any],
    projection: Optional[Iterable[str]],
    keep_rules: bool,
) -> List[Dict[str, Any]]:
    method = "marketCatalogue"
    wanted = None if projection is None else set(projection)

    def requested(name: str) -> bool:
        return wanted is None or name in wanted

    expand_runners = requested("RUNNER_DESCRIPTION") or requested("RUNNER_METADATA")
    rows: List[Dict[str, Any]] = []

    for i, record in enumerate(records):
        _require(record, "marketId", method, i)
        _require(record, "marketName", method, i)

        market: Dict[str, Any] = {}
        runners = None
        for key, value in record.items():
            if key == "runners":
                runners = value
            elif key == "description":
                if requested("MARKET_DESCRIPTION") and isinstance(value, dict):
                    _promote(value, "", market)
            elif key in CATALOGUE_SECTIONS:
                if requested(CATALOGUE_SECTIONS[key]) and isinstance(value, dict):
                    _promote(value, f"{key}.", market)
            elif key == "marketStartTime":
                if requested("MARKET_START_TIME"):
                    market[key] = value
            elif isinstance(value, dict):
                _promote(value, f"{key}.", market)
            else:
                market[key] = value

        if not keep_rules:
            market.pop("rules", None)

        if not expand_runners or runners is None:
            rows.append(market)
            continue
        if not isinstance(runners, list):
            raise ParseError(method, "runners", i)
        if not runners:
            rows.append(market)
            continue

        for runner in runners:
            _require(runner, "selectionId", method, i)
            row = dict(market)
            for key, value in runner.items():
                if key == "metadata":
                    if requested("RUNNER_METADATA") and isinstance(value, dict):
                        _promote(value, "runner.metadata.", row)
                elif isinstance(value, dict):
                    _promote(value, f"runner.{key}.", row)
                else:
                    row[f"runner.{key}"] = value
            rows.append(row)

    return rows


def flatten(
    result: Any,
    method: str,
    market_projection: Optional[Iterable[str]] = None,
    keep_rules: bool = False,
) -> pd.DataFrame:
    """
    Flatten a list* result into a DataFrame.

    Args:
        result: The decoded 'result' member of the response
        method: Facade method name ('competitions', 'marketCatalogue', ...)
        market_projection: Normalised projections sent with a marketCatalogue
            request; sections not listed are left out. None keeps everything.
        keep_rules: Keep the market rules text column (marketCatalogue)

    Returns:
        One row per record; marketCatalogue expands to one row per runner

    Raises:
        ParseError: A record is missing a required field
    """
    records = _records(result, method)
    if method == "marketCatalogue":
        rows = _flatten_catalogue(records, market_projection, keep_rules)
    elif method in SIMPLE_SHAPES:
        rows = _flatten_simple(records, method)
    else:
        raise ValueError(f"no table shape for {method!r}")
    return pd.DataFrame(rows)
