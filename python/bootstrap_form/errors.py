"""Exceptions raised when the form helpers are misused."""


class BootstrapFormError(Exception):
    """Base exception for all bootstrap_form errors."""


class UnsupportedWidgetError(BootstrapFormError, ValueError):
    """A dynamic select was asked to render a control type it does not know."""

    def __init__(self, widget_type: str, name: str | None = None):
        self.widget_type = widget_type
        self.name = name
        message = f"Unsupported widget type {widget_type!r}"
        if name:
            message += f" for field {name!r}"
        super().__init__(f"{message}\n\n  Expected one of: select, text, password, textarea")


class RouteNotFoundError(BootstrapFormError, LookupError):
    """A form was opened against a route or action that is not registered."""

    def __init__(self, name: str, kind: str = "route"):
        self.name = name
        self.kind = kind
        super().__init__(f"{kind.capitalize()} [{name}] not defined.")
