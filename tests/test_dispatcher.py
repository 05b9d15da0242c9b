import json

import pytest

from amap_service.adapters import AdapterError, ConfigError
from amap_service.mapping import MapClient
from amap_service.schemas import RouteResult
from route_agent.dispatcher import ToolDispatcher
from route_agent.settings import AgentSettings
from route_agent.state import RouteSession, TraceRecord
from route_agent.tools.route import summarize_route


def make_route(distance=25300, duration=1860, tolls=0.0):
    return RouteResult(
        distance=distance,
        duration=duration,
        tolls=tolls,
        polyline=[(113.94, 22.52), (114.0, 22.6), (114.01, 22.69)],
        steps=[],
        origin=(113.94, 22.52),
        destination=(114.01, 22.69),
    )


def make_dispatcher(client, session=None, trace=None):
    return ToolDispatcher(
        AgentSettings(),
        client,
        session or RouteSession(session_id="s1"),
        trace_id="trace-1",
        trace=trace,
    )


def test_route_summary_is_unit_converted():
    summary = summarize_route(make_route(tolls=5))
    assert summary == {
        "success": True,
        "distance": "25.3 公里",
        "duration": "31 分钟",
        "tolls": "5 元",
        "steps_count": 0,
    }
    assert summarize_route(make_route())["tolls"] == "无过路费"


@pytest.mark.anyio
async def test_unknown_tool_is_a_tagged_result(amap_settings, fake_amap):
    result = await make_dispatcher(MapClient(amap_settings)).execute("book_hotel", {})
    assert not result.ok
    assert result.error.code == "NOT_FOUND"
    assert "book_hotel" in result.error.message
    assert fake_amap.calls == []


@pytest.mark.anyio
async def test_poi_search_before_route_asks_to_plan_first(amap_settings, fake_amap):
    result = await make_dispatcher(MapClient(amap_settings)).execute("search_poi_along_route", {"keywords": "西餐厅"})
    assert not result.ok
    assert result.error.code == "NO_ROUTE"
    assert "请先规划路线" in result.error.message
    assert result.llm_content() == "错误: 请先规划路线"
    assert fake_amap.calls == []


@pytest.mark.anyio
async def test_geocode_produces_marker_without_provider_frame(amap_settings, fake_amap):
    result = await make_dispatcher(MapClient(amap_settings)).execute("geocode", {"address": "深圳湾科技园"})
    assert result.ok
    assert result.data["found"] is True
    assert "location_gcj02" not in result.data
    marker = result.map_data.markers[0]
    assert marker.name == "深圳湾科技园"
    assert marker.type == "location"
    assert marker.location == result.data["location"]
    assert "gcj02" not in result.model_dump_json()


@pytest.mark.anyio
async def test_geocode_miss_is_reported_as_data(amap_settings, fake_amap):
    result = await make_dispatcher(MapClient(amap_settings)).execute("geocode", {"address": "nonexistent-place-xyz"})
    assert result.ok
    assert result.data["found"] is False
    assert "nonexistent-place-xyz" in result.data["message"]
    assert result.map_data is None


@pytest.mark.anyio
async def test_route_then_poi_search_uses_session_route(amap_settings, fake_amap):
    session = RouteSession(session_id="s1")
    dispatcher = make_dispatcher(MapClient(amap_settings), session)

    route_result = await dispatcher.execute(
        "plan_driving_route",
        {"origin": "深圳湾科技园", "destination": "龙华大浪", "waypoints": "宝安沙井"},
    )
    assert route_result.ok
    assert route_result.data["distance"] == "25.3 公里"
    assert route_result.data["tolls"] == "5 元"
    assert session.current_route == route_result.map_data.route

    poi_result = await dispatcher.execute(
        "search_poi_along_route", {"keywords": "西餐厅", "category": "western_restaurant"}
    )
    assert poi_result.ok
    assert poi_result.data["count"] == 2
    first = poi_result.data["recommendations"][0]
    assert first == {
        "name": "西堤牛排",
        "address": "科技园南区",
        "rating": "4.5",
        "cost": "人均 120.00 元",
        "tel": "暂无电话",
    }
    assert poi_result.data["recommendations"][1]["cost"] == "暂无价格"
    around_calls = [params for path, params in fake_amap.calls if path == "place/around"]
    assert len(around_calls) == 5
    assert all(params["types"] == "050200" for params in around_calls)
    assert [p.id for p in poi_result.map_data.pois] == ["B0FFG1", "B0FFG2"]


@pytest.mark.anyio
async def test_route_is_scoped_to_its_session(amap_settings, fake_amap):
    client = MapClient(amap_settings)
    first = RouteSession(session_id="a")
    other = RouteSession(session_id="b")
    await make_dispatcher(client, first).execute("plan_driving_route", {"origin": "深圳湾科技园", "destination": "龙华大浪"})
    result = await make_dispatcher(client, other).execute("search_poi_along_route", {"keywords": "加油站"})
    assert first.current_route is not None
    assert result.error.code == "NO_ROUTE"


@pytest.mark.anyio
async def test_unresolved_waypoint_is_reported_back(amap_settings, fake_amap):
    result = await make_dispatcher(MapClient(amap_settings)).execute(
        "plan_driving_route",
        {"origin": "深圳湾科技园", "destination": "龙华大浪", "waypoints": "nonexistent-place-xyz"},
    )
    assert not result.ok
    assert result.error.code == "UNRESOLVED_ADDRESS"
    assert result.llm_content() == "错误: 无法解析途经点地址: nonexistent-place-xyz"


@pytest.mark.anyio
async def test_route_not_found_is_tagged(amap_settings, fake_amap):
    fake_amap.driving = {"status": "1", "route": {"paths": []}}
    session = RouteSession(session_id="s1")
    result = await make_dispatcher(MapClient(amap_settings), session).execute(
        "plan_driving_route", {"origin": "深圳湾科技园", "destination": "龙华大浪"}
    )
    assert result.error.code == "ROUTE_NOT_FOUND"
    assert session.current_route is None


@pytest.mark.anyio
async def test_invalid_arguments_are_tagged(amap_settings, fake_amap):
    dispatcher = make_dispatcher(MapClient(amap_settings))
    result = await dispatcher.execute("plan_driving_route", {"origin": "深圳湾科技园"})
    assert result.error.code == "INVALID_ARGUMENT"
    result = await dispatcher.execute("search_poi_along_route", {"keywords": "x", "category": "spa"})
    assert result.error.code == "INVALID_ARGUMENT"


class ExplodingClient:
    def __init__(self, exc):
        self.exc = exc

    async def geocode(self, address, city=None):
        raise self.exc


@pytest.mark.anyio
async def test_unexpected_exceptions_are_isolated():
    result = await make_dispatcher(ExplodingClient(KeyError("boom"))).execute("geocode", {"address": "x"})
    assert result.error.code == "TOOL_ERROR"
    result = await make_dispatcher(ExplodingClient(AdapterError("UPSTREAM_UNAVAILABLE", "timeout"))).execute(
        "geocode", {"address": "x"}
    )
    assert result.error.code == "UPSTREAM_UNAVAILABLE"
    assert json.loads(result.model_dump_json())["ok"] is False


@pytest.mark.anyio
async def test_config_errors_are_not_swallowed():
    with pytest.raises(ConfigError):
        await make_dispatcher(ExplodingClient(ConfigError("AMAP_API_KEY is not set"))).execute(
            "geocode", {"address": "x"}
        )


@pytest.mark.anyio
async def test_tool_calls_are_traced(amap_settings, fake_amap):
    trace = TraceRecord(trace_id="trace-1", started_at="now")
    dispatcher = make_dispatcher(MapClient(amap_settings), trace=trace)
    await dispatcher.execute("geocode", {"address": "深圳湾科技园"})
    await dispatcher.execute("nope", {})
    assert [t["status"] for t in trace.tools] == ["ok", "error"]
    assert trace.tools[0]["map_kinds"] == ["markers"]
