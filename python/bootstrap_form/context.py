"""Application collaborators consulted while rendering.

The form helpers never own the database, router or translator of the host
application. They only ask simple questions through the objects defined
here: does a table exist, which routes are registered, which model class
backs a table, what is the first record matching a column.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Protocol

from .urls import Route

__all__ = [
    "AppContext",
    "DictTranslator",
    "InMemoryRecords",
    "RecordSource",
    "data_get",
    "model_table",
]

logger = logging.getLogger(__name__)

_MISSING = object()


class RecordSource(Protocol):
    """Anything that can look up a single record by column value."""

    def first_where(self, column: str, value: Any) -> Any: ...


def data_get(target, key, default=None):
    """Read a dotted path through mappings, sequences and attributes.

    Example:
        >>> data_get({"user": {"name": "Ada"}}, "user.name")
        'Ada'
        >>> data_get({"tags": ["a", "b"]}, "tags.1")
        'b'
    """
    if key is None or key == "":
        return target
    for segment in str(key).split("."):
        if target is None:
            return default
        if isinstance(target, Mapping):
            target = target.get(segment, _MISSING)
        elif isinstance(target, (list, tuple)):
            try:
                target = target[int(segment)]
            except (ValueError, IndexError):
                target = _MISSING
        else:
            target = getattr(target, segment, _MISSING)
        if target is _MISSING:
            return default
    return target


def model_table(model) -> str | None:
    """Table name of a model class or instance."""
    get_table = getattr(model, "get_table", None)
    if callable(get_table):
        return get_table()
    return getattr(model, "__tablename__", None) or getattr(model, "table", None)


class InMemoryRecords:
    """Record source over a list of dicts (or objects)."""

    def __init__(self, records: Iterable[Any] = ()):
        self.records = list(records)

    def first_where(self, column: str, value: Any) -> Any:
        for record in self.records:
            candidate = data_get(record, column)
            if candidate == value or (candidate is not None and str(candidate) == str(value)):
                return record
        return None


class DictTranslator:
    """Translation lookups backed by a flat dict of dotted keys."""

    def __init__(self, messages: Mapping[str, str] | None = None):
        self.messages = dict(messages or {})

    def has(self, key: str) -> bool:
        return key in self.messages

    def get(self, key: str, default: str | None = None) -> str | None:
        return self.messages.get(key, default)


@dataclass
class AppContext:
    """What the dynamic select widget may know about the host application.

    Attributes:
        tables: Names of existing database tables. ``None`` means the schema
            is unknown and table guessing by name is skipped.
        routes: Registered routes, used to find ``<table>/list`` endpoints.
            ``None`` means routes are unknown and no URL is guessed.
        models: Model classes or record sources keyed by dotted class name
            (``"User"``, ``"Admin.UserRole"``).
        records: Record sources keyed by table name; the fallback when no
            model matches a table.
        controller: Handler of the current request, e.g.
            ``"admin.UserController@index"``.
    """

    tables: set[str] | None = None
    routes: list[Route] | None = None
    models: dict[str, Any] = field(default_factory=dict)
    records: dict[str, RecordSource] = field(default_factory=dict)
    controller: str | None = None

    @property
    def has_schema(self) -> bool:
        return self.tables is not None

    @property
    def has_routes(self) -> bool:
        return self.routes is not None

    def has_table(self, name: str | None) -> bool:
        return bool(name) and self.tables is not None and name in self.tables

    def find_model(self, name: str):
        model = self.models.get(name)
        if model is None:
            logger.debug("No model registered as %s", name)
        return model

    def records_for(self, table: str) -> RecordSource | None:
        return self.records.get(table)
