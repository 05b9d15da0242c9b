import copy

import pytest

from amap_service.adapters import amap
from amap_service.settings import AmapSettings

GEOCODES = {
    "深圳湾科技园": {
        "formatted_address": "广东省深圳市南山区深圳湾科技生态园",
        "province": "广东省",
        "city": "深圳市",
        "district": "南山区",
        "adcode": "440305",
        "location": "113.944000,22.524000",
    },
    "龙华大浪": {
        "formatted_address": "广东省深圳市龙华区大浪街道",
        "province": "广东省",
        "city": "深圳市",
        "district": "龙华区",
        "adcode": "440309",
        "location": "114.017000,22.690000",
    },
    "宝安沙井": {
        "formatted_address": "广东省深圳市宝安区沙井街道",
        "province": "广东省",
        "city": "深圳市",
        "district": "宝安区",
        "adcode": "440306",
        "location": "113.830000,22.730000",
    },
}

DRIVING = {
    "status": "1",
    "info": "OK",
    "route": {
        "paths": [
            {
                "distance": "25300",
                "duration": "1860",
                "tolls": "5",
                "steps": [
                    {
                        "instruction": "向北行驶1200米右转",
                        "road": "沙河西路",
                        "distance": "1200",
                        "duration": "180",
                        "polyline": "113.944000,22.524000;113.945000,22.530000",
                    },
                    {
                        "instruction": "沿南坪快速行驶24100米到达终点",
                        "road": [],
                        "distance": "24100",
                        "duration": "1680",
                        "polyline": "113.945000,22.530000;113.990000,22.610000;114.017000,22.690000",
                    },
                ],
            },
            {"distance": "30000", "duration": "2400", "tolls": "0", "steps": []},
        ]
    },
}


def make_poi(poi_id, name, rating=None, location="113.950000,22.530000", **extra):
    biz_ext = {"rating": rating if rating is not None else [], "cost": extra.pop("cost", [])}
    poi = {
        "id": poi_id,
        "name": name,
        "type": "餐饮服务;外国餐厅;西餐厅",
        "typecode": "050200",
        "address": "科技园南区",
        "location": location,
        "tel": [],
        "distance": "320",
        "biz_ext": biz_ext,
        "photos": [{"title": [], "url": f"http://store.is.autonavi.com/{poi_id}.jpg"}],
        "business_area": "科技园",
    }
    poi.update(extra)
    return poi


class FakeAmap:
    """Stands in for the adapter's HTTP function, routing by API path."""

    def __init__(self):
        self.calls = []
        self.geocodes = dict(GEOCODES)
        self.driving = copy.deepcopy(DRIVING)
        self.pois = [
            make_poi("B0FFG1", "西堤牛排", rating="4.5", cost="120.00"),
            make_poi("B0FFG2", "必胜客", rating="4.1"),
        ]
        self.regeo_address = "广东省深圳市南山区粤海街道深圳湾科技生态园"

    async def __call__(self, path, params, timeout_s):
        self.calls.append((path, dict(params)))
        if path == "geocode/geo":
            hit = self.geocodes.get(params["address"])
            return {"status": "1", "info": "OK", "count": "1" if hit else "0", "geocodes": [hit] if hit else []}
        if path == "geocode/regeo":
            return {"status": "1", "info": "OK", "regeocode": {"formatted_address": self.regeo_address}}
        if path == "direction/driving":
            return self.driving
        if path == "place/around":
            return {"status": "1", "info": "OK", "count": str(len(self.pois)), "pois": self.pois}
        raise AssertionError(f"unexpected path {path}")

    def paths(self):
        return [path for path, _ in self.calls]


@pytest.fixture
def amap_env(monkeypatch):
    monkeypatch.setenv("AMAP_API_KEY", "test-amap-key")
    from amap_service.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def amap_settings(amap_env):
    return AmapSettings()


@pytest.fixture
def fake_amap(monkeypatch):
    fake = FakeAmap()
    monkeypatch.setattr(amap, "_get_json", fake)
    return fake


@pytest.fixture
def anyio_backend():
    return "asyncio"
