"""
Tests for the market filter and type definitions
"""

from datetime import datetime, timezone

import pytest

from betfairapi import (
    MarketFilter,
    TimeRange,
    PriceProjection,
    MarketBettingType,
    OrderStatus,
    PriceData,
    ValidationError,
    build_filter,
)


class TestBuildFilter:
    """Test cases for build_filter / MarketFilter"""

    def test_empty_filter(self):
        """Test that no options gives an empty wire dict"""
        assert build_filter().to_dict() == {}

    def test_unset_fields_are_omitted(self):
        """Test only set fields reach the wire"""
        wire = build_filter(event_type_ids=[1], in_play_only=False).to_dict()

        assert wire == {"eventTypeIds": [1], "inPlayOnly": False}

    def test_empty_list_is_kept(self):
        """Test an explicit empty list is sent, not dropped"""
        assert build_filter(market_ids=[]).to_dict() == {"marketIds": []}

    def test_scalar_id_is_wrapped(self):
        """Test a single id is accepted as a one-element list"""
        assert build_filter(competition_ids=10932509).competition_ids == [10932509]

    def test_all_wire_names(self):
        """Test every field maps to its exchange wire name"""
        wire = build_filter(
            text_query="arsenal",
            exchange_ids=["1"],
            event_type_ids=["1"],
            event_ids=["32848227"],
            competition_ids=["10932509"],
            market_ids=["1.223041398"],
            venues=["Ascot"],
            bsp_only=True,
            turn_in_play_enabled=True,
            in_play_only=False,
            market_betting_types=["odds"],
            market_countries=["GB"],
            market_type_codes=["MATCH_ODDS"],
            market_start_time=("2024-01-20T00:00:00Z", "2024-01-21T00:00:00Z"),
            with_orders=[OrderStatus.EXECUTABLE],
        ).to_dict()

        assert wire == {
            "textQuery": "arsenal",
            "exchangeIds": ["1"],
            "eventTypeIds": ["1"],
            "eventIds": ["32848227"],
            "competitionIds": ["10932509"],
            "marketIds": ["1.223041398"],
            "venues": ["Ascot"],
            "bspOnly": True,
            "turnInPlayEnabled": True,
            "inPlayOnly": False,
            "marketBettingTypes": ["ODDS"],
            "marketCountries": ["GB"],
            "marketTypeCodes": ["MATCH_ODDS"],
            "marketStartTime": {
                "from": "2024-01-20T00:00:00Z",
                "to": "2024-01-21T00:00:00Z",
            },
            "withOrders": ["EXECUTABLE"],
        }

    def test_betting_types_normalised(self):
        """Test betting types accept enum members and lowercase strings"""
        f = build_filter(market_betting_types=[MarketBettingType.LINE, "asian_handicap_single_line"])

        assert f.market_betting_types == [
            MarketBettingType.LINE,
            MarketBettingType.ASIAN_HANDICAP_SINGLE_LINE,
        ]

    def test_unknown_option(self):
        """Test unknown options are rejected"""
        with pytest.raises(ValidationError) as exc_info:
            build_filter(event_typeids=[1])

        assert exc_info.value.field == "event_typeids"

    @pytest.mark.parametrize(
        "options, field",
        [
            ({"event_type_ids": {"a": 1}}, "event_type_ids"),
            ({"event_type_ids": [1.5]}, "event_type_ids"),
            ({"market_ids": [True]}, "market_ids"),
            ({"venues": [1]}, "venues"),
            ({"in_play_only": "yes"}, "in_play_only"),
            ({"text_query": 5}, "text_query"),
            ({"market_betting_types": ["EVENS"]}, "market_betting_types"),
            ({"with_orders": ["SETTLED"]}, "with_orders"),
            ({"market_start_time": "2024-01-20"}, "market_start_time"),
        ],
    )
    def test_bad_shapes(self, options, field):
        """Test badly shaped values name the offending field"""
        with pytest.raises(ValidationError) as exc_info:
            build_filter(**options)

        assert exc_info.value.field == field

    def test_filter_is_frozen(self):
        """Test filters cannot be changed after construction"""
        f = MarketFilter(event_type_ids=["1"])

        with pytest.raises(Exception):
            f.event_type_ids = ["2"]


class TestTimeRange:
    """Test cases for TimeRange"""

    def test_open_ended(self):
        """Test a range with only a start bound"""
        window = TimeRange(start="2024-01-20T12:30:00Z")

        assert window.to_dict() == {"from": "2024-01-20T12:30:00Z"}

    def test_datetimes(self):
        """Test datetime bounds are serialised as ISO-8601"""
        window = TimeRange(
            datetime(2024, 1, 20, 12, 0, tzinfo=timezone.utc),
            datetime(2024, 1, 20, 18, 0, tzinfo=timezone.utc),
        )

        assert window.to_dict() == {
            "from": "2024-01-20T12:00:00Z",
            "to": "2024-01-20T18:00:00Z",
        }

    def test_start_after_end(self):
        """Test start must not be after end"""
        with pytest.raises(ValidationError):
            TimeRange("2024-01-21T00:00:00Z", "2024-01-20T00:00:00Z")

    def test_no_bounds(self):
        """Test at least one bound is required"""
        with pytest.raises(ValidationError):
            TimeRange()

    def test_not_a_timestamp(self):
        """Test junk bounds are rejected"""
        with pytest.raises(ValidationError):
            TimeRange("tomorrow", None)


class TestPriceProjection:
    """Test cases for PriceProjection"""

    def test_to_dict(self):
        """Test price projection wire names"""
        projection = PriceProjection(
            price_data=["ex_best_offers", PriceData.EX_TRADED],
            virtualise=True,
        )

        assert projection.to_dict() == {
            "priceData": ["EX_BEST_OFFERS", "EX_TRADED"],
            "virtualise": True,
        }

    def test_unknown_price_data(self):
        """Test unknown price data values are rejected"""
        with pytest.raises(ValidationError):
            PriceProjection(price_data=["EVERYTHING"])
