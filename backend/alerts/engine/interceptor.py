"""Catch-all subscription to the host event bus.

The host has no "listen to everything" API, so one shared listener is
attached to every dispatch list: the ones that exist at ``register()`` time
and every list the registry creates afterwards. Registries without creation
hooks are reconciled by polling instead.
"""

from __future__ import annotations

import inspect
import logging
import sys
import threading
from collections.abc import Callable, Iterable
from typing import Any

from alerts.bus.handlers import RegisteredListener
from alerts.core.config import DEFAULT_DENIED_EVENT_TYPES
from alerts.core.ports import EventRegistryPort

LOGGER = logging.getLogger("EventInterceptor")

_CLASS_INIT_FRAME = "__init_subclass__"


def _qualified_name(event_type: Any) -> str | None:
    if not isinstance(event_type, type):
        return None
    return f"{event_type.__module__}.{event_type.__qualname__}"


def _loaded_type(name: str) -> Any | None:
    """Look up an already-imported type by qualified name without importing."""
    module_name, _, attr_path = name.rpartition(".")
    while module_name:
        module = sys.modules.get(module_name)
        if module is not None:
            obj: Any = module
            for attr in attr_path.split("."):
                obj = getattr(obj, attr, None)
                if obj is None:
                    return None
            return obj
        module_name, _, head = module_name.rpartition(".")
        attr_path = f"{head}.{attr_path}"
    return None


class EventInterceptor:
    def __init__(
        self,
        registry: EventRegistryPort,
        on_event: Callable[[Any], None],
        *,
        denied_event_types: Iterable[str] = DEFAULT_DENIED_EVENT_TYPES,
        reconcile_interval: float = 5.0,
    ) -> None:
        self._registry = registry
        self._denied = frozenset(denied_event_types)
        self._reconcile_interval = reconcile_interval
        self.listener = RegisteredListener(self, on_event)

        self._lock = threading.RLock()
        self._registered = False
        self._hooked = False
        # ids of lists already handled by polling; subscription is keyed by list identity
        self._seen: set[int] = set()
        self._stop_polling: threading.Event | None = None
        self._poll_thread: threading.Thread | None = None

    @property
    def registered(self) -> bool:
        return self._registered

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def register(self) -> None:
        with self._lock:
            if self._registered:
                return
            try:
                add_hook = getattr(self._registry, "add_creation_hook", None)
                if callable(add_hook):
                    add_hook(self._on_handler_list_created)
                    self._hooked = True
                else:
                    LOGGER.warning(
                        "Event registry has no creation hook, polling every "
                        f"{self._reconcile_interval:.1f}s for new event types"
                    )
                    self._start_polling()
                self.reconcile()
            except Exception as e:
                LOGGER.error(
                    f"Failed to hook the event registry ({type(e).__name__}: {e}); "
                    "alerts will not receive events"
                )
            self._registered = True

    def unregister(self) -> None:
        with self._lock:
            if self._hooked:
                remove_hook = getattr(self._registry, "remove_creation_hook", None)
                if callable(remove_hook):
                    remove_hook(self._on_handler_list_created)
                self._hooked = False
            poll_thread = self._stop_polling_thread()

            try:
                for handler_list in self._registry.handler_lists():
                    handler_list.unregister(self.listener)
            except Exception as e:
                LOGGER.error(f"Failed to detach from the event registry: {type(e).__name__}: {e}")
            self._seen.clear()
            self._registered = False

        # Joined outside the lock, the poll loop takes it on every round
        if poll_thread is not None and poll_thread is not threading.current_thread():
            poll_thread.join(timeout=self._reconcile_interval + 1)

    def reconcile(self) -> None:
        """Attach to every list in the registry not handled yet.

        A list that fails to attach is logged and skipped.
        """
        with self._lock:
            for handler_list in self._registry.handler_lists():
                if id(handler_list) in self._seen:
                    continue
                self._seen.add(id(handler_list))
                try:
                    self.attach(handler_list)
                except Exception as e:
                    LOGGER.error(f"Failed to attach to {handler_list!r}: {type(e).__name__}: {e}")

    def attach(self, handler_list: Any) -> bool:
        """Add the listener to *handler_list* unless denied or already present."""
        with self._lock:
            if self.is_denied(handler_list):
                return False
            if any(lst is self.listener for lst in handler_list.registered_listeners()):
                return False
            try:
                handler_list.register(self.listener)
            except ValueError:
                # the list already holds this listener
                return False
            return True

    def detach(self, handler_list: Any) -> None:
        """Stop receiving events from one list until it is reported again."""
        handler_list.unregister(self.listener)

    def _on_handler_list_created(self, handler_list: Any) -> None:
        with self._lock:
            self._seen.add(id(handler_list))
            try:
                self.attach(handler_list)
            except Exception as e:
                LOGGER.error(f"Failed to attach to {handler_list!r}: {type(e).__name__}: {e}")

    # ------------------------------------------------------------------
    # Deny-list
    # ------------------------------------------------------------------

    def is_denied(self, handler_list: Any) -> bool:
        if not self._denied:
            return False

        for name in self._denied:
            denied_type = _loaded_type(name)
            get_handler_list = getattr(denied_type, "get_handler_list", None)
            if get_handler_list is None:
                continue
            try:
                if get_handler_list() is handler_list:
                    LOGGER.debug(f"Skipping handler list for {name}")
                    return True
            except Exception as e:
                LOGGER.debug(f"Failed to check if handler list was for {name}: {e}")

        match = self._denied_type_initializing()
        if match is not None:
            LOGGER.debug(f"Skipping handler list for {match} (during event type creation)")
            return True
        return False

    def _denied_type_initializing(self) -> str | None:
        """Return the denied type whose class creation is on the call stack."""
        frame = inspect.currentframe()
        try:
            while frame is not None:
                code_name = frame.f_code.co_name
                if code_name == _CLASS_INIT_FRAME:
                    name = _qualified_name(frame.f_locals.get("cls"))
                    if name in self._denied:
                        return name
                else:
                    qualname = frame.f_locals.get("__qualname__")
                    if isinstance(qualname, str) and qualname.rsplit(".", 1)[-1] == code_name:
                        name = f"{frame.f_globals.get('__name__')}.{qualname}"
                        if name in self._denied:
                            return name
                frame = frame.f_back
        finally:
            del frame
        return None

    # ------------------------------------------------------------------
    # Polling fallback
    # ------------------------------------------------------------------

    def _start_polling(self) -> None:
        self._stop_polling = threading.Event()
        self._poll_thread = threading.Thread(
            target=self._poll_loop,
            args=(self._stop_polling,),
            name="alerts-registry-poll",
            daemon=True,
        )
        self._poll_thread.start()

    def _stop_polling_thread(self) -> threading.Thread | None:
        if self._stop_polling is not None:
            self._stop_polling.set()
        thread = self._poll_thread
        self._stop_polling = None
        self._poll_thread = None
        return thread

    def _poll_loop(self, stop: threading.Event) -> None:
        while not stop.wait(self._reconcile_interval):
            try:
                with self._lock:
                    if stop.is_set():
                        break
                    self.reconcile()
            except Exception as e:
                LOGGER.warning(f"Event registry reconcile failed: {type(e).__name__}: {e}")
