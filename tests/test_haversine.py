from types import SimpleNamespace

import pytest

from algorithms.haversine import find_nearby_donors, haversine_distance, is_valid_coordinate

PUNE = (18.5204, 73.8567)
MUMBAI = (19.0760, 72.8777)


def test_distance_between_cities():
    assert haversine_distance(*PUNE, *MUMBAI) == pytest.approx(120, abs=2)
    assert haversine_distance(*PUNE, *PUNE) == 0


def test_distance_is_symmetric():
    assert haversine_distance(*PUNE, *MUMBAI) == pytest.approx(haversine_distance(*MUMBAI, *PUNE))


@pytest.mark.parametrize('lat, lon, valid', [
    (0, 0, True),
    (90, 180, True),
    (-90, -180, True),
    (90.1, 0, False),
    (0, -180.1, False),
    (float('inf'), 0, False),
    (0, float('nan'), False),
])
def test_is_valid_coordinate(lat, lon, valid):
    assert is_valid_coordinate(lat, lon) is valid


def test_find_nearby_donors_sorts_and_skips_unlocated():
    near = SimpleNamespace(latitude=18.5300, longitude=73.8500)
    nearer = SimpleNamespace(latitude=18.5210, longitude=73.8570)
    far = SimpleNamespace(latitude=MUMBAI[0], longitude=MUMBAI[1])
    unlocated = SimpleNamespace(latitude=None, longitude=None)
    on_equator = SimpleNamespace(latitude=0.0, longitude=73.8567)

    pairs = find_nearby_donors(*PUNE, [near, far, unlocated, nearer, on_equator], 10)

    assert [donor for donor, _ in pairs] == [nearer, near]
    assert pairs[0][1] < pairs[1][1] <= 10
