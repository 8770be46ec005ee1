import sys, os
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))
import threading
import numpy as np
import pytest
from utils.errors import CaptureCancelledError
from utils.settings import POSITION_GO_TO
from vision.pointcloud import MultiViewAggregator, PointCloud, merge_point_clouds
from tests.fakes import FakeFrames, FakePosition, FakeSource, translation


def test_merge_point_clouds():
    a = PointCloud.from_arrays([[0, 0, 0]], [[1, 2, 3]])
    b = PointCloud.from_arrays([[1, 1, 1], [2, 2, 2]])
    merged = merge_point_clouds([a, PointCloud(), b])
    assert merged.size() == 3
    assert np.allclose(merged.points[1:], b.points)
    assert tuple(merged.colors[0]) == (1, 2, 3, 255)


def test_aggregate_moves_each_capture_into_world():
    log = []
    frames = FakeFrames()
    src = FakeSource("cam", PointCloud.from_arrays([[0, 0, 0], [1, 0, 0]]))
    positions = [
        FakePosition(log, "left", frames, "cam", translation(-10, 0, 0)),
        FakePosition(log, "right", frames, "cam", translation(10, 0, 0)),
    ]
    agg = MultiViewAggregator(src, positions, frames, settle_seconds=0.01)
    out = agg.aggregate()

    assert log == [("left", POSITION_GO_TO), ("right", POSITION_GO_TO)]
    assert src.calls == 2
    assert frames.requests == [("cam", "world"), ("cam", "world")]
    assert np.allclose(out.points, [[-10, 0, 0], [-9, 0, 0], [10, 0, 0], [11, 0, 0]])


def test_default_settle_time():
    src = FakeSource("cam", PointCloud())
    assert MultiViewAggregator(src, [], FakeFrames(), 0).settle_seconds == 1.0
    assert MultiViewAggregator(src, [], FakeFrames(), -3).settle_seconds == 1.0
    assert MultiViewAggregator(src, [], FakeFrames()).settle_seconds == 1.0


def test_failure_aborts_aggregation():
    log = []
    src = FakeSource("cam", PointCloud.from_arrays([[0, 0, 0]]), error=IOError("no frame"))
    positions = [FakePosition(log, "a"), FakePosition(log, "b")]
    agg = MultiViewAggregator(src, positions, FakeFrames(), settle_seconds=0.01)
    with pytest.raises(IOError):
        agg.aggregate()
    assert log == [("a", POSITION_GO_TO)]


def test_missing_pose_aborts_aggregation():
    src = FakeSource("cam", PointCloud.from_arrays([[0, 0, 0]]))
    agg = MultiViewAggregator(src, [FakePosition([], "a")], FakeFrames(), settle_seconds=0.01)
    with pytest.raises(KeyError):
        agg.aggregate()


def test_cancel_while_settling():
    cancel = threading.Event()
    cancel.set()
    src = FakeSource("cam", PointCloud())
    agg = MultiViewAggregator(src, [FakePosition([], "a")], FakeFrames(), settle_seconds=5)
    with pytest.raises(CaptureCancelledError):
        agg.aggregate(cancel=cancel)
    assert src.calls == 0


class CancelAwareSource(FakeSource):
    supports_cancel = True

    def next_point_cloud(self, extra=None, cancel=None):
        self.seen_cancel = cancel
        return super().next_point_cloud(extra)


def test_cancel_is_forwarded_to_capture():
    cancel = threading.Event()
    src = CancelAwareSource("cam", PointCloud.from_arrays([[0, 0, 0]]))
    frames = FakeFrames({"cam": translation(0, 0, 0)})
    agg = MultiViewAggregator(src, [FakePosition([], "a")], frames, settle_seconds=0.01)
    agg.aggregate(cancel=cancel)
    assert src.seen_cancel is cancel


def test_injected_capture_is_used():
    calls = []
    src = FakeSource("cam", PointCloud.from_arrays([[1, 0, 0]]))
    frames = FakeFrames({"cam": translation(0, 0, 0)})

    def capture(source, extra, cancel):
        calls.append((source, extra))
        return source.next_point_cloud(extra)

    agg = MultiViewAggregator(
        src, [FakePosition([], "a")], frames, settle_seconds=0.01, capture=capture
    )
    agg.aggregate({"k": 1})
    assert calls == [(src, {"k": 1})]
