import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BioSnapshot:
    """Immutable view of one page's generation state.

    ``output`` is the last successfully generated bio and survives failed
    submissions; ``error`` describes the most recent failure only.
    """

    loading: bool = False
    output: str | None = None
    error: dict[str, Any] | None = None

    @property
    def status(self) -> str:
        if self.loading:
            return "loading"
        if self.error is not None:
            return "failed"
        if self.output is not None:
            return "done"
        return "idle"

    def as_meta(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "output": self.output,
            "error": self.error,
        }


Subscriber = Callable[[BioSnapshot], None]


class BioState:
    """Observable holder for the generation result of a single page."""

    def __init__(self) -> None:
        self._snapshot = BioSnapshot()
        self._subscribers: list[Subscriber] = []

    @property
    def snapshot(self) -> BioSnapshot:
        return self._snapshot

    @property
    def loading(self) -> bool:
        return self._snapshot.loading

    @property
    def output(self) -> str | None:
        return self._snapshot.output

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def update(self, **changes: Any) -> BioSnapshot:
        self._snapshot = replace(self._snapshot, **changes)
        logger.debug("state.update status=%s", self._snapshot.status)
        for callback in list(self._subscribers):
            callback(self._snapshot)
        return self._snapshot
