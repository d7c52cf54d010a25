"""
Type definitions, enums and the market filter for the Betfair Exchange API
"""

from enum import Enum
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Union
from datetime import datetime

from .errors import ValidationError


class MarketProjection(str, Enum):
    """Optional sections of a market catalogue entry"""

    COMPETITION = "COMPETITION"
    EVENT = "EVENT"
    EVENT_TYPE = "EVENT_TYPE"
    MARKET_START_TIME = "MARKET_START_TIME"
    MARKET_DESCRIPTION = "MARKET_DESCRIPTION"
    RUNNER_DESCRIPTION = "RUNNER_DESCRIPTION"
    RUNNER_METADATA = "RUNNER_METADATA"


class MarketSort(str, Enum):
    """Ordering of market catalogue results"""

    MINIMUM_TRADED = "MINIMUM_TRADED"
    MAXIMUM_TRADED = "MAXIMUM_TRADED"
    MINIMUM_AVAILABLE = "MINIMUM_AVAILABLE"
    MAXIMUM_AVAILABLE = "MAXIMUM_AVAILABLE"
    FIRST_TO_START = "FIRST_TO_START"
    LAST_TO_START = "LAST_TO_START"


class MarketBettingType(str, Enum):
    """Betting types a market can offer"""

    ODDS = "ODDS"
    LINE = "LINE"
    RANGE = "RANGE"
    ASIAN_HANDICAP_DOUBLE_LINE = "ASIAN_HANDICAP_DOUBLE_LINE"
    ASIAN_HANDICAP_SINGLE_LINE = "ASIAN_HANDICAP_SINGLE_LINE"
    FIXED_ODDS = "FIXED_ODDS"


class OrderStatus(str, Enum):
    """Order states usable in a filter's withOrders"""

    PENDING = "PENDING"
    EXECUTION_COMPLETE = "EXECUTION_COMPLETE"
    EXECUTABLE = "EXECUTABLE"
    EXPIRED = "EXPIRED"


class OrderProjection(str, Enum):
    """Orders to include in a market book"""

    ALL = "ALL"
    EXECUTABLE = "EXECUTABLE"
    EXECUTION_COMPLETE = "EXECUTION_COMPLETE"


class MatchProjection(str, Enum):
    """How matched amounts are rolled up in a market book"""

    NO_ROLLUP = "NO_ROLLUP"
    ROLLED_UP_BY_PRICE = "ROLLED_UP_BY_PRICE"
    ROLLED_UP_BY_AVG_PRICE = "ROLLED_UP_BY_AVG_PRICE"


class PriceData(str, Enum):
    """Price ladders to include in a market book"""

    SP_AVAILABLE = "SP_AVAILABLE"
    SP_TRADED = "SP_TRADED"
    EX_BEST_OFFERS = "EX_BEST_OFFERS"
    EX_ALL_OFFERS = "EX_ALL_OFFERS"
    EX_TRADED = "EX_TRADED"


def coerce_enum(enum_cls, value, field_name: str):
    """Return the enum member for value (case-insensitive) or raise ValidationError"""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.upper())
        except ValueError:
            pass
    allowed = ", ".join(m.value for m in enum_cls)
    raise ValidationError(
        f"{field_name}: {value!r} is not one of {allowed}", field=field_name
    )


def _parse_timestamp(value, field_name: str) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
    raise ValidationError(
        f"{field_name}: {value!r} is not an ISO-8601 timestamp", field=field_name
    )


def _format_timestamp(value: datetime) -> str:
    text = value.isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


@dataclass(frozen=True)
class TimeRange:
    """Represents a from/to window, either bound optional"""

    start: Optional[Union[datetime, str]] = None
    end: Optional[Union[datetime, str]] = None

    def __post_init__(self):
        start = _parse_timestamp(self.start, "market_start_time")
        end = _parse_timestamp(self.end, "market_start_time")
        if start is None and end is None:
            raise ValidationError(
                "market_start_time: at least one bound is required",
                field="market_start_time",
            )
        if start is not None and end is not None:
            try:
                reversed_range = start > end
            except TypeError:
                raise ValidationError(
                    "market_start_time: cannot mix naive and timezone-aware bounds",
                    field="market_start_time",
                )
            if reversed_range:
                raise ValidationError(
                    "market_start_time: start is after end", field="market_start_time"
                )
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    def to_dict(self) -> Dict[str, str]:
        out = {}
        if self.start is not None:
            out["from"] = _format_timestamp(self.start)
        if self.end is not None:
            out["to"] = _format_timestamp(self.end)
        return out


def _id_list(value, field_name: str) -> List[str]:
    if isinstance(value, (str, int)) and not isinstance(value, bool):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise ValidationError(
            f"{field_name}: expected a list of ids, got {type(value).__name__}",
            field=field_name,
        )
    ids = []
    for item in value:
        if isinstance(item, bool) or not isinstance(item, (str, int)):
            raise ValidationError(
                f"{field_name}: {item!r} is not an id", field=field_name
            )
        ids.append(item)
    return ids


def _str_list(value, field_name: str) -> List[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)) or not all(
        isinstance(item, str) for item in value
    ):
        raise ValidationError(
            f"{field_name}: expected a list of strings", field=field_name
        )
    return list(value)


def _flag(value, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name}: expected True or False", field=field_name)
    return value


# attribute name -> (wire name, normaliser)
_FILTER_FIELDS = {
    "text_query": ("textQuery", None),
    "exchange_ids": ("exchangeIds", _id_list),
    "event_type_ids": ("eventTypeIds", _id_list),
    "event_ids": ("eventIds", _id_list),
    "competition_ids": ("competitionIds", _id_list),
    "market_ids": ("marketIds", _id_list),
    "venues": ("venues", _str_list),
    "bsp_only": ("bspOnly", _flag),
    "turn_in_play_enabled": ("turnInPlayEnabled", _flag),
    "in_play_only": ("inPlayOnly", _flag),
    "market_betting_types": ("marketBettingTypes", None),
    "market_countries": ("marketCountries", _str_list),
    "market_type_codes": ("marketTypeCodes", _str_list),
    "market_start_time": ("marketStartTime", None),
    "with_orders": ("withOrders", None),
}


@dataclass(frozen=True)
class MarketFilter:
    """
    Selection criteria shared by the list* operations.

    Every field is optional; unset fields are left out of the request
    entirely. An explicitly empty list is kept and sent as ``[]``.
    """

    text_query: Optional[str] = None
    exchange_ids: Optional[List[Union[str, int]]] = None
    event_type_ids: Optional[List[Union[str, int]]] = None
    event_ids: Optional[List[Union[str, int]]] = None
    competition_ids: Optional[List[Union[str, int]]] = None
    market_ids: Optional[List[Union[str, int]]] = None
    venues: Optional[List[str]] = None
    bsp_only: Optional[bool] = None
    turn_in_play_enabled: Optional[bool] = None
    in_play_only: Optional[bool] = None
    market_betting_types: Optional[List[MarketBettingType]] = None
    market_countries: Optional[List[str]] = None
    market_type_codes: Optional[List[str]] = None
    market_start_time: Optional[TimeRange] = None
    with_orders: Optional[List[OrderStatus]] = None

    def __post_init__(self):
        for name, (_, normalise) in _FILTER_FIELDS.items():
            value = getattr(self, name)
            if value is None:
                continue
            if normalise is not None:
                object.__setattr__(self, name, normalise(value, name))

        if self.text_query is not None and not isinstance(self.text_query, str):
            raise ValidationError("text_query: expected a string", field="text_query")

        if self.market_betting_types is not None:
            values = _str_list_or_enums(self.market_betting_types, "market_betting_types")
            object.__setattr__(
                self,
                "market_betting_types",
                [coerce_enum(MarketBettingType, v, "market_betting_types") for v in values],
            )

        if self.with_orders is not None:
            values = _str_list_or_enums(self.with_orders, "with_orders")
            object.__setattr__(
                self,
                "with_orders",
                [coerce_enum(OrderStatus, v, "with_orders") for v in values],
            )

        window = self.market_start_time
        if window is not None and not isinstance(window, TimeRange):
            if not isinstance(window, (list, tuple)) or len(window) != 2:
                raise ValidationError(
                    "market_start_time: expected a (from, to) pair",
                    field="market_start_time",
                )
            object.__setattr__(self, "market_start_time", TimeRange(*window))

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation, unset fields omitted"""
        out: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            wire_name = _FILTER_FIELDS[f.name][0]
            if isinstance(value, TimeRange):
                out[wire_name] = value.to_dict()
            elif isinstance(value, list):
                out[wire_name] = [v.value if isinstance(v, Enum) else v for v in value]
            else:
                out[wire_name] = value
        return out


def _str_list_or_enums(value, field_name: str) -> list:
    if isinstance(value, (str, Enum)):
        return [value]
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"{field_name}: expected a list", field=field_name)
    return list(value)


def build_filter(**options) -> MarketFilter:
    """
    Build a validated MarketFilter from keyword options.

    Example:
        build_filter(event_type_ids=[1], in_play_only=False,
                     market_start_time=("2024-01-01T00:00:00Z", None))

    Raises:
        ValidationError: Unknown option or badly shaped value
    """
    unknown = sorted(set(options) - set(_FILTER_FIELDS))
    if unknown:
        raise ValidationError(
            f"unknown filter option(s): {', '.join(unknown)}", field=unknown[0]
        )
    return MarketFilter(**options)


@dataclass
class PriceProjection:
    """Price ladder options for a market book request"""

    price_data: List[PriceData] = field(default_factory=list)
    ex_best_offers_overrides: Optional[Dict[str, Any]] = None
    virtualise: Optional[bool] = None
    rollover_stakes: Optional[bool] = None

    def __post_init__(self):
        values = _str_list_or_enums(self.price_data, "price_projection")
        self.price_data = [coerce_enum(PriceData, v, "price_projection") for v in values]

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"priceData": [p.value for p in self.price_data]}
        if self.ex_best_offers_overrides is not None:
            out["exBestOffersOverrides"] = self.ex_best_offers_overrides
        if self.virtualise is not None:
            out["virtualise"] = self.virtualise
        if self.rollover_stakes is not None:
            out["rolloverStakes"] = self.rollover_stakes
        return out


@dataclass(frozen=True)
class Session:
    """Represents a logged-in session"""

    token: str
    app_key: str
    created_at: datetime
    product: Optional[str] = None
    status: Optional[str] = None
    raw_response: Dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass(frozen=True)
class SessionSummary:
    """Read-only view of the current session"""

    token: str
    app_key: str
    created_at: datetime
    product: Optional[str]
    status: Optional[str]

    @classmethod
    def from_session(cls, session: Session) -> "SessionSummary":
        return cls(
            token=session.token,
            app_key=session.app_key,
            created_at=session.created_at,
            product=session.product,
            status=session.status,
        )
