# utils/events.py
import logging
from typing import Callable, Dict, List

Handler = Callable[..., None]

class EventBus:
    """Synchronous publish/subscribe on the main loop thread.

    Kinds used by the app: ``note_on``, ``note_off``, ``transport``,
    ``text_changed``, ``midi_status``.
    """
    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = {}

    def subscribe(self, kind: str, handler: Handler) -> Handler:
        self._handlers.setdefault(kind, []).append(handler)
        return handler

    def unsubscribe(self, kind: str, handler: Handler):
        hs = self._handlers.get(kind)
        if hs and handler in hs:
            hs.remove(handler)

    def publish(self, kind: str, **payload):
        for h in list(self._handlers.get(kind, ())):
            try:
                h(**payload)
            except Exception:
                logging.exception("event handler failed: kind=%s handler=%r", kind, h)
