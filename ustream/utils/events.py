"""Phase notifications for upload sessions."""
import inspect
import logging
from collections import defaultdict
from typing import Any, Callable, DefaultDict, List

logger = logging.getLogger(__name__)


class EventEmitter:
    """
    Dispatches upload phase events to subscribed listeners.

    Listeners may be plain functions or coroutine functions. Each ``emit``
    works on a snapshot of the listeners, so concurrent uploads never wait
    on each other and a listener may subscribe or unsubscribe while it runs.
    """

    def __init__(self):
        self._listeners: DefaultDict[str, List[Callable[..., Any]]] = defaultdict(list)

    def on(self, event_name: str, callback: Callable[..., Any]) -> None:
        if callback not in self._listeners[event_name]:
            self._listeners[event_name].append(callback)

    def off(self, event_name: str, callback: Callable[..., Any]) -> None:
        listeners = self._listeners.get(event_name)
        if listeners and callback in listeners:
            listeners.remove(callback)

    def listeners(self, event_name: str) -> List[Callable[..., Any]]:
        return list(self._listeners.get(event_name, ()))

    async def emit(self, event_name: str, *args: Any) -> None:
        """Call every listener of ``event_name``; a failing listener is logged, never raised."""
        for callback in self.listeners(event_name):
            try:
                result = callback(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.error("Listener %r for %s failed", callback, event_name, exc_info=True)
