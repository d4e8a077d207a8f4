"""Validation message containers read by the form helpers.

The helpers only read messages; populating them is the job of whatever
validation layer the application uses. ``MessageBag.from_validation_error``
covers the common pydantic case.
"""

from typing import Iterable, Mapping

from pydantic import ValidationError

from .html import escape_html

__all__ = ["MessageBag", "ViewErrorBag"]

DEFAULT_FORMAT = ":message"


class MessageBag:
    """Messages keyed by (dotted) field name."""

    def __init__(self, messages: Mapping[str, Iterable[str] | str] | None = None):
        self._messages: dict[str, list[str]] = {}
        for key, value in (messages or {}).items():
            if isinstance(value, str):
                value = [value]
            for message in value:
                self.add(key, message)

    @classmethod
    def from_validation_error(cls, error: ValidationError) -> "MessageBag":
        """Collect pydantic errors, keyed by their dotted location."""
        bag = cls()
        for detail in error.errors():
            key = ".".join(str(part) for part in detail["loc"]) or "__root__"
            bag.add(key, detail["msg"])
        return bag

    def add(self, key: str, message: str) -> "MessageBag":
        messages = self._messages.setdefault(key, [])
        if message not in messages:
            messages.append(message)
        return self

    def has(self, key: str) -> bool:
        return bool(self._messages.get(key))

    def first(self, key: str, format: str = DEFAULT_FORMAT) -> str:
        """First message for ``key`` rendered through ``format``, or ``""``."""
        messages = self.get(key, format)
        return messages[0] if messages else ""

    def get(self, key: str, format: str = DEFAULT_FORMAT) -> list[str]:
        """All messages for ``key``; ``:message`` and ``:key`` are substituted."""
        return [self._transform(key, m, format) for m in self._messages.get(key, [])]

    def all(self, format: str = DEFAULT_FORMAT) -> list[str]:
        return [
            self._transform(key, m, format)
            for key, messages in self._messages.items()
            for m in messages
        ]

    def keys(self) -> list[str]:
        return list(self._messages)

    def count(self) -> int:
        return sum(len(m) for m in self._messages.values())

    def is_empty(self) -> bool:
        return self.count() == 0

    @staticmethod
    def _transform(key: str, message: str, format: str) -> str:
        return format.replace(":message", escape_html(message)).replace(":key", escape_html(key))

    def __bool__(self):
        return not self.is_empty()

    def __len__(self):
        return self.count()

    def __repr__(self):
        return f"MessageBag({self._messages!r})"


class ViewErrorBag:
    """Named message bags, one per form on a page.

    Calls that are not about bags are forwarded to the ``default`` bag, so a
    ViewErrorBag can be used wherever a single MessageBag is expected.
    """

    def __init__(self, bags: Mapping[str, MessageBag | Mapping] | None = None):
        self._bags: dict[str, MessageBag] = {}
        for name, bag in (bags or {}).items():
            self.put(name, bag)

    def put(self, name: str, bag: MessageBag | Mapping) -> "ViewErrorBag":
        if not isinstance(bag, MessageBag):
            bag = MessageBag(bag)
        self._bags[name] = bag
        return self

    def has_bag(self, name: str = "default") -> bool:
        return name in self._bags

    def get_bag(self, name: str) -> MessageBag:
        return self._bags.get(name) or MessageBag()

    def get_bags(self) -> dict[str, MessageBag]:
        return dict(self._bags)

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self.get_bag("default"), name)

    def __bool__(self):
        return any(self._bags.values())

    def __repr__(self):
        return f"ViewErrorBag({self._bags!r})"
