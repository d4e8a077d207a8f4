"""Runtime extension of helper classes with named macros.

A macro is a plain function registered under a name. Once registered it is
callable as a method on every instance:

    @BootstrapForm.macro
    def color(self, name, label=None, value=None, options=None):
        return self.input('color', name, label, value, options)

    form.color('favourite_color')

Functions whose first parameter is named ``self`` receive the instance;
others are called with the arguments as given:

    BootstrapForm.macro('divider', lambda: Markup('<hr>'))
    form.divider()
"""

import functools
import inspect

__all__ = ["Macroable"]


def _takes_self(fn) -> bool:
    try:
        params = list(inspect.signature(fn).parameters)
    except (TypeError, ValueError):
        return False
    return bool(params) and params[0] == "self"


class Macroable:
    """Mixin that lets callers register extra methods at runtime."""

    @classmethod
    def macro(cls, name, fn=None):
        """Register ``fn`` under ``name``.

        Can be called directly (``macro("name", fn)``) or used as a
        decorator, with or without an explicit name.
        """
        if callable(name) and fn is None:
            fn, name = name, name.__name__
        elif fn is None:
            return lambda f: cls.macro(name, f)

        if "_macros" not in cls.__dict__:
            cls._macros = {}
        cls._macros[name] = fn
        return fn

    @classmethod
    def has_macro(cls, name) -> bool:
        return cls._find_macro(name) is not None

    @classmethod
    def flush_macros(cls):
        cls.__dict__.get("_macros", {}).clear()

    @classmethod
    def _find_macro(cls, name):
        for klass in cls.__mro__:
            macros = klass.__dict__.get("_macros")
            if macros and name in macros:
                return macros[name]
        return None

    def __getattr__(self, name):
        if name.startswith("__"):
            raise AttributeError(name)
        fn = type(self)._find_macro(name)
        if fn is None:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute or macro {name!r}")
        if _takes_self(fn):
            return functools.partial(fn, self)
        return fn
