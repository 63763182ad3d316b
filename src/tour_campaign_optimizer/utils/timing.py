"""Rate limiting wrappers for callbacks."""

import functools
import threading
import time
from collections.abc import Callable
from typing import Any


def throttle(func: Callable[..., Any], delay: float) -> Callable[..., None]:
    """Run ``func`` at most once per ``delay`` seconds.

    A call inside the window replaces any pending trailing call, which then
    runs when the window closes.
    """
    lock = threading.Lock()
    state: dict[str, Any] = {"last_exec": None, "timer": None}

    def run(*args: Any, **kwargs: Any) -> None:
        with lock:
            state["last_exec"] = time.monotonic()
            state["timer"] = None
        func(*args, **kwargs)

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> None:
        now = time.monotonic()
        with lock:
            last_exec = state["last_exec"]
            if last_exec is None or now - last_exec > delay:
                state["last_exec"] = now
                run_now = True
            else:
                run_now = False
                if state["timer"] is not None:
                    state["timer"].cancel()
                timer = threading.Timer(
                    delay - (now - last_exec), run, args=args, kwargs=kwargs
                )
                timer.daemon = True
                state["timer"] = timer
                timer.start()
        if run_now:
            func(*args, **kwargs)

    return wrapper


def debounce(func: Callable[..., Any], delay: float) -> Callable[..., None]:
    """Run ``func`` once ``delay`` seconds have passed without another call."""
    lock = threading.Lock()
    state: dict[str, threading.Timer | None] = {"timer": None}

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> None:
        with lock:
            if state["timer"] is not None:
                state["timer"].cancel()
            timer = threading.Timer(delay, func, args=args, kwargs=kwargs)
            timer.daemon = True
            state["timer"] = timer
            timer.start()

    return wrapper
