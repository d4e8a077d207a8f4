"""Raw form element rendering.

FormBuilder knows nothing about Bootstrap. It renders plain ``<form>``,
``<input>``, ``<select>``, ``<textarea>``, ``<label>`` and ``<button>``
elements, prefilling values from old input (the session) or from a bound
model. BootstrapForm wraps its output in Bootstrap markup.
"""

from collections.abc import Mapping
from datetime import date, datetime, time

from markupsafe import Markup

from .context import data_get
from .html import HtmlBuilder, escape_html, to_html_string
from .urls import UrlGenerator

__all__ = ["FormBuilder", "choice_items", "transform_key"]


def transform_key(key: str) -> str:
    """Turn an input name into a dotted lookup path: ``user[name]`` → ``user.name``."""
    return key.replace('.', '_').replace('[]', '').replace('[', '.').replace(']', '')


def choice_items(choices):
    if not choices:
        return []
    if isinstance(choices, Mapping):
        return list(choices.items())
    items = []
    for choice in choices:
        if isinstance(choice, (list, tuple)) and len(choice) == 2:
            items.append((choice[0], choice[1]))
        else:
            items.append((choice, choice))
    return items


class FormBuilder:
    """Renders form elements and tracks the model bound to the open form.

    Args:
        html: Attribute renderer.
        url: URL generator for ``url``/``route``/``action`` form options.
        csrf_token: Token rendered as a hidden ``_token`` field on non-GET forms.
        session: Mapping holding ``errors`` and ``_old_input`` of the previous request.
    """

    reserved = ('method', 'url', 'route', 'action', 'files')
    spoofed_methods = ('DELETE', 'PATCH', 'PUT')
    skip_value_types = ('file', 'password', 'checkbox', 'radio')

    def __init__(self, html: HtmlBuilder, url: UrlGenerator | None = None, csrf_token: str | None = None, session=None):
        self.html = html
        self.url = url or UrlGenerator()
        self.csrf_token = csrf_token
        self.session = session
        self._model = None
        self.labels: list[str] = []
        self.type: str | None = None

    # Forms

    def open(self, options=None) -> Markup:
        options = dict(options or {})
        method = str(options.get('method', 'post')).upper()

        attributes = {
            'method': method if method in ('GET', 'POST') else 'POST',
            'action': self.get_action(options),
            'accept-charset': 'UTF-8',
        }
        if options.get('files'):
            attributes['enctype'] = 'multipart/form-data'
        attributes.update((k, v) for k, v in options.items() if k not in self.reserved)

        return to_html_string(f'<form{self.html.attributes(attributes)}>{self._get_append(method)}')

    def model(self, model, options=None) -> Markup:
        self._model = model
        return self.open(options)

    def close(self) -> Markup:
        self.labels = []
        self._model = None
        return to_html_string('</form>')

    def token(self) -> Markup:
        return self.hidden('_token', self.csrf_token)

    def get_action(self, options) -> str:
        if 'url' in options:
            url = options['url']
            if isinstance(url, (list, tuple)):
                return self.url.to(url[0])
            return self.url.to(url)
        for kind in ('route', 'action'):
            if kind in options:
                target = options[kind]
                if isinstance(target, (list, tuple)):
                    name, parameters = target[0], list(target[1:])
                else:
                    name, parameters = target, []
                return getattr(self.url, kind)(name, parameters)
        return self.url.current()

    def _get_append(self, method: str) -> str:
        parts = []
        if method in self.spoofed_methods:
            parts.append(self.hidden('_method', method))
        if method != 'GET' and self.csrf_token:
            parts.append(self.token())
        return ''.join(parts)

    # Labels

    def label(self, name, value=None, options=None, escape_html=True) -> Markup:
        self.labels.append(name)
        attributes = self.html.attributes(options)
        value = self.format_label(name, value)
        if escape_html:
            value = _escape(value)
        return to_html_string(f'<label for="{_escape(name)}"{attributes}>{value}</label>')

    @staticmethod
    def format_label(name, value) -> str:
        if value:
            return value
        return ' '.join(w[:1].upper() + w[1:] for w in name.replace('_', ' ').split(' '))

    # Inputs

    def input(self, type, name, value=None, options=None) -> Markup:
        options = dict(options or {})
        self.type = type

        if 'name' not in options:
            options['name'] = name

        id = self.get_id_attribute(name, options)

        if type not in self.skip_value_types:
            value = self.get_value_attribute(name, value)

        if type == 'date' and isinstance(value, date):
            value = value.strftime('%Y-%m-%d')
        elif type == 'time' and isinstance(value, (datetime, time)):
            value = value.strftime('%H:%M')

        options.update({'type': type, 'value': value, 'id': id})
        return to_html_string(f'<input{self.html.attributes(options)}>')

    def text(self, name, value=None, options=None) -> Markup:
        return self.input('text', name, value, options)

    def email(self, name, value=None, options=None) -> Markup:
        return self.input('email', name, value, options)

    def url_input(self, name, value=None, options=None) -> Markup:
        return self.input('url', name, value, options)

    def tel(self, name, value=None, options=None) -> Markup:
        return self.input('tel', name, value, options)

    def number(self, name, value=None, options=None) -> Markup:
        return self.input('number', name, value, options)

    def date(self, name, value=None, options=None) -> Markup:
        return self.input('date', name, value, options)

    def time(self, name, value=None, options=None) -> Markup:
        return self.input('time', name, value, options)

    def hidden(self, name, value=None, options=None) -> Markup:
        return self.input('hidden', name, value, options)

    def password(self, name, options=None) -> Markup:
        return self.input('password', name, '', options)

    def file(self, name, options=None) -> Markup:
        return self.input('file', name, None, options)

    def submit(self, value=None, options=None) -> Markup:
        return self.input('submit', None, value, options)

    def button(self, value=None, options=None) -> Markup:
        options = dict(options or {})
        if 'type' not in options:
            options['type'] = 'button'
        return to_html_string(f'<button{self.html.attributes(options)}>{value if value is not None else ""}</button>')

    def textarea(self, name, value=None, options=None) -> Markup:
        options = dict(options or {})
        self.type = 'textarea'

        if 'name' not in options:
            options['name'] = name

        options = self._set_text_area_size(options)
        options['id'] = self.get_id_attribute(name, options)
        value = self.get_value_attribute(name, value)
        options.pop('size', None)

        return to_html_string(f'<textarea{self.html.attributes(options)}>{_escape(value)}</textarea>')

    @staticmethod
    def _set_text_area_size(options):
        if 'size' in options:
            cols, _, rows = str(options['size']).partition('x')
            options.update({'cols': cols, 'rows': rows})
            return options
        options.update({'cols': options.get('cols', 50), 'rows': options.get('rows', 10)})
        return options

    # Checkable inputs

    def checkbox(self, name, value=1, checked=None, options=None) -> Markup:
        return self._checkable('checkbox', name, value, checked, options)

    def radio(self, name, value=None, checked=None, options=None) -> Markup:
        if value is None:
            value = name
        return self._checkable('radio', name, value, checked, options)

    def _checkable(self, type, name, value, checked, options) -> Markup:
        options = dict(options or {})
        self.type = type
        if self.get_checked_state(type, name, value, checked):
            options['checked'] = 'checked'
        return self.input(type, name, value, options)

    def get_checked_state(self, type, name, value, checked) -> bool:
        if type == 'checkbox':
            return self._get_checkbox_checked_state(name, value, checked)
        if type == 'radio':
            return self._get_radio_checked_state(name, value, checked)
        return bool(checked)

    def _get_checkbox_checked_state(self, name, value, checked) -> bool:
        if self._old_input() and self.old(name) is None:
            return False
        if self._missing_old_and_model(name):
            return bool(checked)
        posted = self.get_value_attribute(name, checked)
        if isinstance(posted, (list, tuple, set)):
            return str(value) in {str(p) for p in posted}
        return bool(posted)

    def _get_radio_checked_state(self, name, value, checked) -> bool:
        if self._missing_old_and_model(name):
            return bool(checked)
        return str(self.get_value_attribute(name)) == str(value)

    def _missing_old_and_model(self, name) -> bool:
        return self.old(name) is None and self.get_model_value_attribute(name) is None

    # Selects

    def select(self, name, choices=None, selected=None, select_attributes=None) -> Markup:
        self.type = 'select'
        selected = self.get_value_attribute(name, selected)

        attributes = dict(select_attributes or {})
        attributes['id'] = self.get_id_attribute(name, attributes)
        if 'name' not in attributes:
            attributes['name'] = name

        parts = []
        placeholder = attributes.pop('placeholder', None)
        if placeholder is not None:
            parts.append(self._placeholder_option(placeholder, selected))

        for value, display in choice_items(choices):
            if isinstance(display, Mapping):
                parts.append(self._option_group(display, value, selected))
            else:
                parts.append(self._option(display, value, selected))

        return to_html_string(f'<select{self.html.attributes(attributes)}>{"".join(parts)}</select>')

    def _option_group(self, choices, label, selected) -> str:
        options = ''.join(self._option(display, value, selected) for value, display in choice_items(choices))
        return f'<optgroup label="{_escape(label)}">{options}</optgroup>'

    def _option(self, display, value, selected) -> str:
        attributes = {'value': value, 'selected': self._get_selected_value(value, selected)}
        return f'<option{self.html.attributes(attributes)}>{_escape(display)}</option>'

    def _placeholder_option(self, display, selected) -> str:
        attributes = {'selected': 'selected' if selected in (None, '') else None, 'value': ''}
        return f'<option{self.html.attributes(attributes)}>{_escape(display)}</option>'

    @staticmethod
    def _get_selected_value(value, selected):
        if selected is None:
            return None
        if isinstance(selected, (list, tuple, set)):
            return 'selected' if str(value) in {str(s) for s in selected} else None
        return 'selected' if str(value) == str(selected) else None

    # Values

    def get_id_attribute(self, name, attributes):
        if 'id' in attributes:
            return attributes['id']
        if name in self.labels:
            return name
        return None

    def get_value_attribute(self, name, value=None):
        if name is None:
            return value

        old = self.old(name)
        if old is not None and name != '_method':
            return old

        if value is not None:
            return value

        if self._model is not None:
            return self.get_model_value_attribute(name)

        return None

    def get_model_value_attribute(self, name):
        if self._model is None:
            return None
        return data_get(self._model, transform_key(name))

    def old(self, name):
        old_input = self._old_input()
        if not old_input:
            return None
        return data_get(old_input, transform_key(name))

    def _old_input(self):
        if self.session is None:
            return None
        return self.session.get('_old_input')

    # Collaborator access

    def get_model(self):
        return self._model

    def set_model(self, model):
        self._model = model

    def get_session_store(self):
        return self.session

    def set_session_store(self, session):
        self.session = session
        return self


def _escape(value) -> str:
    return escape_html(value)
