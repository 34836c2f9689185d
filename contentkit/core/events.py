"""
Event Dispatch
==============

Named events with per-instance and per-class handlers. Listeners can mark an
event handled to stop propagation, and cancelable events carry an ``is_valid``
flag that lets a listener abort the operation that triggered them.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from contentkit.config.logging import get_logger

logger = get_logger(__name__)

Handler = Callable[["Event"], None]


class Event:
    """Base event object passed to handlers."""

    def __init__(self, **data: Any) -> None:
        self.name: Optional[str] = None
        self.sender: Any = None
        self.handled = False
        for key, value in data.items():
            setattr(self, key, value)


class CancelableEvent(Event):
    """Event whose ``is_valid`` flag can be cleared to cancel an operation."""

    def __init__(self, **data: Any) -> None:
        self.is_valid = True
        super().__init__(**data)


class FieldElementEvent(CancelableEvent):
    """Raised around element save, delete, and restore for each field."""

    def __init__(self, element: Any = None, is_new: bool = False, **data: Any) -> None:
        super().__init__(element=element, is_new=is_new, **data)


class DefineFieldKeywordsEvent(Event):
    """Lets listeners supply custom search keywords.

    ``handled`` must be set to True for ``keywords`` to be used.
    """

    def __init__(self, value: Any = None, element: Any = None, **data: Any) -> None:
        super().__init__(value=value, element=element, **data)
        self.keywords = data.get("keywords", "")


class DefineFieldHtmlEvent(Event):
    """Lets listeners replace a field's input HTML."""

    def __init__(self, value: Any = None, element: Any = None, html: str = "", **data: Any) -> None:
        super().__init__(value=value, element=element, html=html, **data)


class Component:
    """Mixin that gives objects named events."""

    _class_handlers: Dict[Tuple[Type[Any], str], List[Handler]] = {}

    def _instance_handlers(self) -> Dict[str, List[Handler]]:
        handlers = self.__dict__.get("_event_handlers")
        if handlers is None:
            handlers = {}
            self.__dict__["_event_handlers"] = handlers
        return handlers

    def on(self, name: str, handler: Handler) -> None:
        """Attach a handler to this instance."""
        self._instance_handlers().setdefault(name, []).append(handler)

    def off(self, name: str, handler: Optional[Handler] = None) -> bool:
        """Detach one handler, or all handlers when none is given."""
        handlers = self._instance_handlers()
        if name not in handlers:
            return False
        if handler is None:
            del handlers[name]
            return True
        try:
            handlers[name].remove(handler)
        except ValueError:
            return False
        return True

    @classmethod
    def on_class(cls, target: Type[Any], name: str, handler: Handler) -> None:
        """Attach a handler to every instance of ``target`` and its subclasses."""
        Component._class_handlers.setdefault((target, name), []).append(handler)

    @classmethod
    def off_class(cls, target: Type[Any], name: str, handler: Optional[Handler] = None) -> bool:
        key = (target, name)
        if key not in Component._class_handlers:
            return False
        if handler is None:
            del Component._class_handlers[key]
            return True
        try:
            Component._class_handlers[key].remove(handler)
        except ValueError:
            return False
        return True

    @classmethod
    def off_all_classes(cls) -> None:
        Component._class_handlers.clear()

    def _handlers_for(self, name: str) -> List[Handler]:
        handlers = list(self._instance_handlers().get(name, []))
        for klass in type(self).__mro__:
            handlers.extend(Component._class_handlers.get((klass, name), []))
        return handlers

    def has_event_handlers(self, name: str) -> bool:
        return bool(self._handlers_for(name))

    def trigger(self, name: str, event: Optional[Event] = None) -> Event:
        """Invoke handlers for ``name`` until one marks the event handled."""
        if event is None:
            event = Event()
        event.name = name
        if event.sender is None:
            event.sender = self
        event.handled = False

        for handler in self._handlers_for(name):
            handler(event)
            if event.handled:
                logger.debug("Event handled", event_name=name, sender=type(self).__name__)
                break

        return event
