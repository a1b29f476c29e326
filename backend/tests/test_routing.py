import pytest

from app.domain.optimization import nearest_neighbor_order
from app.routing.optimizer import (
    InsufficientPointsError,
    TourPreconditionError,
    build_tour,
    solve,
)
from app.schemas.tours import TourPoint


def _points(*coordinates):
    return [TourPoint(latitude=lat, longitude=lon) for lat, lon in coordinates]


def test_solve_collinear_points():
    result = solve(_points((0, 0), (0, 1), (0, 2)))

    assert [stop.input_index for stop in result.stops] == [0, 1, 2]
    assert [stop.order for stop in result.stops] == [0, 1, 2]
    legs = [stop.distance_to_next_km for stop in result.stops]
    assert legs == pytest.approx([111.32, 111.32, 222.64])
    assert result.total_distance_km == pytest.approx(445.28)
    assert result.path == [(0, 0), (0, 1), (0, 2), (0, 0)]


def test_solve_records_leg_on_previous_stop():
    result = solve(_points((0, 0), (0, 3), (0, 1)))

    assert [stop.input_index for stop in result.stops] == [0, 2, 1]
    first, second, last = result.stops
    assert first.distance_to_next_km == pytest.approx(111.32)
    assert second.distance_to_next_km == pytest.approx(2 * 111.32)
    assert last.distance_to_next_km == pytest.approx(3 * 111.32)


def test_solve_coincident_points():
    result = solve(_points((0, 0), (0, 0)))

    assert result.total_distance_km == 0.0
    assert [stop.distance_to_next_km for stop in result.stops] == [0.0, 0.0]
    assert [stop.input_index for stop in result.stops] == [0, 1]
    assert result.path == [(0, 0), (0, 0), (0, 0)]


def test_solve_rejects_single_point():
    with pytest.raises(InsufficientPointsError) as excinfo:
        solve(_points((1, 1)))

    assert isinstance(excinfo.value, TourPreconditionError)
    assert excinfo.value.received == 1
    assert excinfo.value.required == 2


def test_solve_rejects_empty_input():
    with pytest.raises(InsufficientPointsError):
        solve([])


def test_tie_goes_to_first_point_in_scan_order():
    result = solve(_points((10, 10), (10, 11), (11, 10)))

    assert [stop.input_index for stop in result.stops] == [0, 1, 2]

    swapped = solve(_points((10, 10), (11, 10), (10, 11)))

    assert [(stop.latitude, stop.longitude) for stop in swapped.stops] == [
        (10, 10),
        (11, 10),
        (10, 11),
    ]


def test_start_is_always_first_input_point():
    points = _points((5, 5), (0, 0), (0, 1), (0, 2))

    result = solve(points)

    assert result.stops[0].input_index == 0
    assert result.stops[0].order == 0
    assert result.path[0] == (5, 5)
    assert result.path[-1] == (5, 5)


def test_solve_invariants_on_scattered_points():
    points = _points(
        (48.8566, 2.3522),
        (48.8606, 2.3376),
        (48.8530, 2.3499),
        (48.8738, 2.2950),
        (48.8867, 2.3431),
        (48.8462, 2.3371),
        (48.8656, 2.3212),
    )

    result = solve(points)

    assert sorted(stop.order for stop in result.stops) == list(range(len(points)))
    assert sorted(stop.input_index for stop in result.stops) == list(
        range(len(points))
    )
    assert len(result.path) == len(points) + 1
    assert result.path[0] == result.path[-1]
    assert result.total_distance_km == pytest.approx(
        sum(stop.distance_to_next_km for stop in result.stops)
    )


def test_solve_is_deterministic():
    points = _points((0, 0), (3, 4), (1, 1), (1, 1), (-2, 5), (4, -1))

    assert solve(points) == solve(points)


def test_duplicates_keep_their_own_stop():
    points = [
        TourPoint(latitude=0, longitude=0, label="home"),
        TourPoint(latitude=0, longitude=1, label="first"),
        TourPoint(latitude=0, longitude=1, label="second"),
    ]

    result = solve(points)

    assert [stop.label for stop in result.stops] == ["home", "first", "second"]
    assert [stop.input_index for stop in result.stops] == [0, 1, 2]


def test_build_tour_single_point_closes_on_itself():
    result = build_tour(_points((4, 2)))

    assert len(result.stops) == 1
    assert result.stops[0].order == 0
    assert result.stops[0].distance_to_next_km == 0.0
    assert result.total_distance_km == 0.0
    assert result.path == [(4, 2), (4, 2)]


def test_nearest_neighbor_order_uses_custom_metric():
    points = _points((0, 0), (0, 1), (0, 2))

    def reversed_metric(a, b):
        return -abs(a.longitude - b.longitude)

    order, legs = nearest_neighbor_order(points, reversed_metric)

    assert order == [0, 2, 1]
    assert legs == [-2, -1, -1]


def test_nearest_neighbor_order_empty():
    assert nearest_neighbor_order([]) == ([], [])
