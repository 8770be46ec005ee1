import sys, os
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))
import threading
import time
import pytest
from utils.errors import CaptureCancelledError, CaptureTimeoutError
from utils.settings import coalescer as COALCFG
from vision.camera.coalescer import CaptureCoalescer
from vision.pointcloud import PointCloud


def test_defaults():
    assert COALCFG.poll_interval == 0.05
    assert COALCFG.wait_timeout == 60.0
    c = CaptureCoalescer()
    assert c.wait_timeout == 60.0
    assert not c.active


def test_single_caller_runs_producer():
    c = CaptureCoalescer()
    pc = PointCloud.from_arrays([[1, 2, 3]])
    start = time.monotonic()
    assert c.capture(lambda: pc) is pc
    assert c.last_timestamp >= start
    assert not c.active


def test_concurrent_callers_share_one_capture():
    c = CaptureCoalescer()
    started = threading.Event()
    calls = []

    def produce():
        calls.append(1)
        started.set()
        time.sleep(0.5)
        return PointCloud.from_arrays([[len(calls), 0, 0]])

    results = {}
    starts = {}

    def worker(i):
        starts[i] = time.monotonic()
        results[i] = c.capture(produce)

    first = threading.Thread(target=worker, args=(0,))
    first.start()
    assert started.wait(2.0)
    others = [threading.Thread(target=worker, args=(i,)) for i in range(1, 5)]
    for t in others:
        t.start()
    for t in [first, *others]:
        t.join(5.0)

    assert len(calls) == 1
    assert len(results) == 5
    assert all(r is results[0] for r in results.values())
    assert all(c.last_timestamp >= s for s in starts.values())


def test_late_caller_triggers_fresh_capture():
    c = CaptureCoalescer()
    counter = iter(range(100))
    first = c.capture(lambda: PointCloud.from_arrays([[next(counter), 0, 0]]))
    second = c.capture(lambda: PointCloud.from_arrays([[next(counter), 0, 0]]))
    assert first is not second
    assert second.points[0, 0] == 1


def test_producer_error_reaches_everyone():
    c = CaptureCoalescer()
    started = threading.Event()

    def produce():
        started.set()
        time.sleep(0.5)
        raise RuntimeError("camera unplugged")

    errors = []

    def worker():
        try:
            c.capture(produce)
        except RuntimeError as exc:
            errors.append(exc)

    threads = [threading.Thread(target=worker)]
    threads[0].start()
    assert started.wait(2.0)
    threads += [threading.Thread(target=worker) for _ in range(3)]
    for t in threads[1:]:
        t.start()
    for t in threads:
        t.join(5.0)

    assert len(errors) == 4
    assert all(e is errors[0] for e in errors)
    assert not c.active


def test_waiter_times_out():
    c = CaptureCoalescer(wait_timeout=0.3)
    release = threading.Event()
    started = threading.Event()

    def produce():
        started.set()
        release.wait(5.0)
        return PointCloud()

    producer = threading.Thread(target=c.capture, args=(produce,))
    producer.start()
    assert started.wait(2.0)
    t0 = time.monotonic()
    with pytest.raises(TimeoutError):
        c.capture(produce)
    waited = time.monotonic() - t0
    assert 0.3 <= waited < 1.0
    release.set()
    producer.join(5.0)


def test_timeout_error_type():
    assert issubclass(CaptureTimeoutError, TimeoutError)


def test_waiter_cancelled():
    c = CaptureCoalescer()
    release = threading.Event()
    started = threading.Event()
    cancel = threading.Event()

    def produce():
        started.set()
        release.wait(5.0)
        return PointCloud()

    producer = threading.Thread(target=c.capture, args=(produce,))
    producer.start()
    assert started.wait(2.0)
    threading.Timer(0.1, cancel.set).start()
    with pytest.raises(CaptureCancelledError):
        c.capture(produce, cancel)
    release.set()
    producer.join(5.0)
