"""bootstrap_form - Bootstrap 3 form markup for server-rendered Python apps.

Public API exports:
- BootstrapForm facade (from bootstrap_form.bootstrap_form)
- Raw element builders (from bootstrap_form.form_builder, bootstrap_form.html)
- Dynamic select widget (from bootstrap_form.dynamic_select)
- Application collaborators (from bootstrap_form.context, bootstrap_form.urls)
- Configuration (from bootstrap_form.config)
"""

# Facade
from bootstrap_form.bootstrap_form import BootstrapForm

# Builders
from bootstrap_form.form_builder import FormBuilder
from bootstrap_form.html import (
    HtmlBuilder,
    escape_html,
    render_attr,
    render_class,
)

# Widgets
from bootstrap_form.dynamic_select import DynamicSelect, SelectizeOptions

# Collaborators
from bootstrap_form.context import (
    AppContext,
    DictTranslator,
    InMemoryRecords,
    data_get,
)
from bootstrap_form.messages import MessageBag, ViewErrorBag
from bootstrap_form.urls import Route, UrlGenerator

# Configuration
from bootstrap_form.config import FormType, Settings, get_settings

# Errors
from bootstrap_form.errors import (
    BootstrapFormError,
    RouteNotFoundError,
    UnsupportedWidgetError,
)

__all__ = [
    # Facade
    'BootstrapForm',
    # Builders
    'FormBuilder',
    'HtmlBuilder',
    'escape_html',
    'render_attr',
    'render_class',
    # Widgets
    'DynamicSelect',
    'SelectizeOptions',
    # Collaborators
    'AppContext',
    'DictTranslator',
    'InMemoryRecords',
    'data_get',
    'MessageBag',
    'ViewErrorBag',
    'Route',
    'UrlGenerator',
    # Configuration
    'FormType',
    'Settings',
    'get_settings',
    # Errors
    'BootstrapFormError',
    'RouteNotFoundError',
    'UnsupportedWidgetError',
]
