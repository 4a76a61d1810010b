"""
Signals observed by presentation code.

The alert path uses these to tell the UI about user-actionable states that
are not errors, such as an out-of-range reading with nobody to email.
"""
import logging
from typing import Callable, List

logger = logging.getLogger(__name__)

NoContactsListener = Callable[[int], None]


class NoContactsSignal:
    """
    Emitted with the user id when an out-of-range reading finds no emergency contacts.

    Listeners are called synchronously in connection order. A failing listener
    is logged and does not stop the others.
    """

    def __init__(self):
        self._listeners: List[NoContactsListener] = []

    def connect(self, listener: NoContactsListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def disconnect(self, listener: NoContactsListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, user_id: int) -> None:
        logger.info("No emergency contacts configured", extra={"user_id": user_id})
        for listener in list(self._listeners):
            try:
                listener(user_id)
            except Exception:
                logger.exception(
                    "No-contacts listener failed",
                    extra={"user_id": user_id, "listener": repr(listener)}
                )
