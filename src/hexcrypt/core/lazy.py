import threading
from collections.abc import Callable
from enum import Enum
from typing import Generic, TypeVar

from hexcrypt.core.errors import CipherInitError
from hexcrypt.shared import Logger

logger = Logger(__name__).get_logger()


class HandleState(Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    FAILED = "failed"


T = TypeVar("T")


class LazyHandle(Generic[T]):
    """A value built on first use, at most once, and kept for the handle's lifetime.

    A factory failure is recorded and re-raised as ``CipherInitError`` on every
    later ``get()``; the factory is never called a second time.
    """

    def __init__(self, factory: Callable[[], T], name: str = "handle"):
        self._factory = factory
        self._name = name
        self._lock = threading.Lock()
        self._state = HandleState.UNINITIALIZED
        self._value: T | None = None
        self._error: Exception | None = None

    @property
    def state(self) -> HandleState:
        return self._state

    def get(self) -> T:
        # Fast path, no lock once settled
        if self._state is HandleState.UNINITIALIZED:
            with self._lock:
                if self._state is HandleState.UNINITIALIZED:
                    self._construct()

        if self._state is HandleState.FAILED:
            raise CipherInitError(
                f"{self._name} is unavailable: {self._error}"
            ) from self._error

        return self._value

    def _construct(self):
        logger.debug("Constructing %s.", self._name)
        try:
            value = self._factory()
        except Exception as e:
            logger.error("LazyHandle-%s :: %s", self._name, e)
            self._error = e
            self._state = HandleState.FAILED
            return

        self._value = value
        # Published last so readers never see READY without a value
        self._state = HandleState.READY
        logger.info("%s ready.", self._name)
