"""
Run a computation at most once and share its outcome with every caller.
"""
import threading
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class SingleFlight(Generic[T]):
    """
    The first call to do() runs func. Callers that arrive while it runs wait
    for it to finish. Every caller, then and later, gets the same return value
    or has the same exception raised.
    """

    def __init__(self, func: Callable[[], T]):
        self._func = func
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._started = False
        self._result: Optional[T] = None
        self._error: Optional[BaseException] = None

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def do(self) -> T:
        with self._lock:
            leader = not self._started
            self._started = True

        if leader:
            try:
                self._result = self._func()
            except BaseException as e:
                self._error = e
            finally:
                self._done.set()
        else:
            self._done.wait()

        if self._error is not None:
            raise self._error
        return self._result
