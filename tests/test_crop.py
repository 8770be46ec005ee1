import sys, os
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))
import numpy as np
from vision.pointcloud import (
    ColorFilter,
    PointCloud,
    Rect,
    crop,
    euclidean_rgb,
    find_highest_in_region,
    find_lowest_in_region,
    in_box,
)


def _random_cloud(n=300, seed=1):
    rng = np.random.default_rng(seed)
    pts = rng.uniform(-10, 10, size=(n, 3))
    colors = rng.integers(0, 256, size=(n, 3), dtype=np.uint8)
    return PointCloud.from_arrays(pts, colors)


def test_in_box_inclusive():
    assert in_box([1, 1, 1], [1, 0, 0], [2, 1, 1])
    assert not in_box([1, 1, 1.01], [1, 0, 0], [2, 1, 1])


def test_crop_by_position():
    pc = _random_cloud()
    lo, hi = [-2, -3, -4], [5, 6, 7]
    out = crop(pc, lo, hi)
    expected = sum(in_box(p, lo, hi) for p in pc.points)
    assert out.size() == expected
    assert all(in_box(p, lo, hi) for p in out.points)


def test_crop_is_idempotent():
    pc = _random_cloud()
    filters = [ColorFilter((128, 128, 128), 150.0)]
    once = crop(pc, [-5, -5, -5], [5, 5, 5], filters)
    twice = crop(once, [-5, -5, -5], [5, 5, 5], filters)
    assert np.array_equal(once.points, twice.points)
    assert np.array_equal(once.colors, twice.colors)


def test_color_filters_are_anded():
    a, b = (100, 100, 100), (140, 100, 100)
    # 5 away from a, 35 away from b
    pc = PointCloud.from_arrays([[0, 0, 0]], [[105, 100, 100]])
    assert crop(pc, [-1] * 3, [1] * 3, [ColorFilter(a, 10)]).size() == 1
    assert crop(pc, [-1] * 3, [1] * 3, [ColorFilter(a, 10), ColorFilter(b, 15)]).size() == 0

    # 20 away from a (fails 15) though 5 away from b
    pc = PointCloud.from_arrays([[0, 0, 0]], [[120, 100, 100]])
    filters = [ColorFilter((100, 100, 100), 15), ColorFilter((125, 100, 100), 10)]
    assert crop(pc, [-1] * 3, [1] * 3, filters).size() == 0


def test_color_distance_ignores_alpha():
    assert euclidean_rgb((0, 0, 0, 0), (3, 4, 0, 255)) == 5.0
    pc = PointCloud.from_arrays([[0, 0, 0]], [[3, 4, 0, 7]])
    assert crop(pc, [0] * 3, [0] * 3, [ColorFilter((0, 0, 0), 5)]).size() == 1


def test_crop_empty():
    assert crop(PointCloud(), [0] * 3, [1] * 3).is_empty()


def test_color_filter_from_dict():
    cf = ColorFilter.from_dict({"color": {"r": 1, "g": 2, "b": 3}, "distance": 4})
    assert cf == ColorFilter((1, 2, 3), 4.0)


def test_highest_and_lowest_in_region():
    pc = PointCloud.from_arrays([[0, 0, 1], [2, 2, 9], [5, 5, -3], [50, 50, 100]])
    box = Rect(0, 0, 5, 5)
    assert np.allclose(find_highest_in_region(pc, box), [2, 2, 9])
    assert np.allclose(find_lowest_in_region(pc, box), [5, 5, -3])
    assert find_highest_in_region(pc, Rect(20, 20, 30, 30)) is None
    assert find_lowest_in_region(PointCloud(), box) is None


def test_region_search_includes_max_edge():
    pc = PointCloud.from_arrays([[5, 5, 1], [5.01, 5, 7]])
    box = Rect(0, 0, 5, 5)
    assert box.contains(5, 5) is False
    assert np.allclose(find_highest_in_region(pc, box), [5, 5, 1])
    assert np.allclose(find_lowest_in_region(pc, box), [5, 5, 1])
