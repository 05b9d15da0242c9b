import pytest

from amap_service.along_route import merge_pois, sample_indices, search_poi_along_route
from amap_service.schemas import POIResult


def poi(poi_id, rating=None):
    return POIResult(id=poi_id, name=f"poi-{poi_id}", location=(114.0, 22.5), rating=rating)


class RecordingClient:
    def __init__(self, batches):
        self.batches = list(batches)
        self.calls = []

    async def search_poi_around(self, center, keywords, **options):
        self.calls.append((center, keywords, options))
        return self.batches.pop(0) if self.batches else []


def test_sample_indices_cover_route_quartiles():
    assert sample_indices(100) == [0, 25, 50, 75, 99]
    assert sample_indices(9) == [0, 2, 4, 6, 8]


def test_sample_indices_dedupe_on_short_polylines():
    assert sample_indices(2) == [0, 1]
    assert sample_indices(1) == [0]
    assert sample_indices(0) == []


def test_merge_dedupes_by_id_and_sorts_by_rating():
    merged = merge_pois(
        [
            [poi("a", "3.9"), poi("b")],
            [poi("a", "4.9"), poi("c", "4.6")],
            [poi("d", "4.6"), poi("b", "5.0")],
        ],
        max_results=10,
    )
    assert [p.id for p in merged] == ["c", "d", "a", "b"]
    # First occurrence wins.
    assert merged[2].rating == "3.9"
    assert len({p.id for p in merged}) == len(merged)


def test_merge_caps_results_and_treats_bad_ratings_as_zero():
    merged = merge_pois([[poi(str(i), rating) for i, rating in enumerate(["4.0", "", None, "n/a", "4.8"])]], 3)
    assert len(merged) == 3
    assert [p.id for p in merged] == ["4", "0", "1"]
    ratings = [p.rating_value() for p in merged]
    assert ratings == sorted(ratings, reverse=True)


@pytest.mark.anyio
async def test_search_along_route_searches_five_points():
    polyline = [(113.9 + i * 0.01, 22.5 + i * 0.01) for i in range(40)]
    client = RecordingClient(
        [
            [poi("a", "4.0"), poi("b", "4.2")],
            [poi("b", "4.2"), poi("c", "4.9")],
            [],
            [poi("d")],
            [poi("e", "3.5"), poi("a", "4.0")],
        ]
    )
    results = await search_poi_along_route(client, polyline, "加油站", types="010100", max_results=4)

    assert [call[0] for call in client.calls] == [polyline[i] for i in (0, 10, 20, 30, 39)]
    for _, keywords, options in client.calls:
        assert keywords == "加油站"
        assert options["radius"] == 2000
        assert options["offset"] == 10
        assert options["types"] == "010100"
        assert options["is_wgs84"] is True
    assert [p.id for p in results] == ["c", "b", "a", "e"]


@pytest.mark.anyio
async def test_search_along_route_defaults_to_ten_results():
    polyline = [(113.9, 22.5), (114.0, 22.6)]
    client = RecordingClient([[poi(f"x{i}", "4.0") for i in range(8)], [poi(f"y{i}", "4.1") for i in range(8)]])
    results = await search_poi_along_route(client, polyline, "餐厅")
    assert len(client.calls) == 2
    assert len(results) == 10
    assert all(p.id.startswith("y") for p in results[:8])


def test_non_finite_ratings_rank_as_unrated():
    assert poi("x", "nan").rating_value() == 0.0
    assert poi("y", "inf").rating_value() == 0.0
    merged = merge_pois([[poi("a", "nan"), poi("b", "4.2"), poi("c", "inf"), poi("d", "3.1")]], max_results=10)
    assert [p.id for p in merged] == ["b", "d", "a", "c"]
