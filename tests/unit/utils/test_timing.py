"""Unit tests for throttle and debounce wrappers."""

import threading
import time

from tour_campaign_optimizer.utils.timing import debounce, throttle


class TestThrottle:
    def test_first_call_runs_immediately(self):
        calls = []
        throttled = throttle(calls.append, 0.5)

        throttled(1)

        assert calls == [1]

    def test_calls_inside_window_collapse_to_trailing_call(self):
        calls = []
        done = threading.Event()

        def record(value):
            calls.append(value)
            if value == 3:
                done.set()

        throttled = throttle(record, 0.1)
        throttled(1)
        throttled(2)
        throttled(3)

        assert done.wait(2)
        assert calls == [1, 3]

    def test_preserves_function_metadata(self):
        def handler():
            """Handle an event."""

        assert throttle(handler, 1).__name__ == "handler"


class TestDebounce:
    def test_runs_once_after_quiet_period(self):
        calls = []
        done = threading.Event()

        def record(value):
            calls.append(value)
            done.set()

        debounced = debounce(record, 0.05)
        debounced("a")
        debounced("b")
        debounced("c")

        assert calls == []
        assert done.wait(2)
        time.sleep(0.1)
        assert calls == ["c"]
