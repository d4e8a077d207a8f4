"""Bootstrap 3 markup around the raw form elements of FormBuilder.

Every field helper renders the same shape:

    <div class="form-group [has-error]">
        <label for="name" class="control-label">Label</label>
        <div>                       (column class on horizontal forms)
            <input ...>
            <span class="help-block">first error</span>
            <span class="help-block">help text</span>
        </div>
    </div>

Field helpers return ``Markup`` so template engines do not escape them again,
and return an empty ``Markup`` when ``is_allowed`` denies the field.
"""

import logging
import re
from collections.abc import Mapping

from markupsafe import Markup

from .config import FormType, Settings, get_settings
from .context import AppContext, DictTranslator, data_get
from .dynamic_select import DynamicSelect
from .form_builder import FormBuilder, choice_items
from .html import HtmlBuilder, escape_html, render_class, to_html_string
from .macros import Macroable
from .messages import MessageBag, ViewErrorBag
from .scripts import (
    js_identifier,
    selectize_ajax_script,
    selectize_many_script,
    selectize_script,
    toggle_script,
)
from .strings import title

__all__ = ["BootstrapForm"]

logger = logging.getLogger(__name__)

DEFAULT_ERROR_FORMAT = '<span class="help-block">:message</span>'

# Options consumed by the helpers that must not leak into element attributes.
_HELPER_OPTIONS = ('help_text', 'prefix', 'suffix')


class BootstrapForm(Macroable):
    """Facade that renders Bootstrap form groups.

    Args:
        html: Attribute renderer.
        form: Raw element builder; holds the bound model and the session.
        config: Framework defaults; the cached environment settings when omitted.
        translator: Label translations looked up as ``forms.<name>``.
        context: Application knowledge used by ``sselectize``.
    """

    def __init__(
        self,
        html: HtmlBuilder,
        form: FormBuilder,
        config: Settings | None = None,
        translator=None,
        context: AppContext | None = None,
    ):
        self.html = html
        self.form = form
        self.config = config or get_settings()
        self.translator = translator or DictTranslator()
        self.context = context or AppContext()

        self.type: str | None = None
        self.left_column_class: str | None = None
        self.left_column_offset_class: str | None = None
        self.right_column_class: str | None = None
        self.icon_prefix: str | None = None
        self.error_bag: str | None = None
        self.error_class: str | None = None
        self.form_name: str | None = None
        self.loaded_assets: set[str] = set()

    def is_allowed(self, element_id) -> bool:
        """Permission hook; override to hide fields from the current user."""
        return True

    # Opening and closing

    def open(self, options=None) -> Markup:
        """Open a form, optionally bound to a model with store/update routes.

        Recognised options besides plain attributes: ``model``, ``store``,
        ``update``, ``url``, ``route``, ``action``, ``method``, ``files``,
        ``error_bag``, ``form_name`` and the three column classes.
        """
        options = dict(options or {})

        if 'form_name' in options:
            self.form_name = options.pop('form_name')

        options['role'] = 'form'

        if 'class' not in options:
            options['class'] = self.get_type()

        if 'left_column_class' in options:
            self.set_left_column_class(options.pop('left_column_class'))
        if 'left_column_offset_class' in options:
            self.set_left_column_offset_class(options.pop('left_column_offset_class'))
        if 'right_column_class' in options:
            self.set_right_column_class(options.pop('right_column_class'))

        if 'error_bag' in options:
            self.set_error_bag(options.pop('error_bag'))

        if 'model' in options:
            return self._open_model(options)

        return self.form.open(options)

    def close(self) -> Markup:
        """Reset per-form state and close the form."""
        self.type = None
        self.left_column_class = self.left_column_offset_class = self.right_column_class = None
        self.error_bag = None
        return self.form.close()

    def _open_model(self, options) -> Markup:
        model = options['model']

        if 'url' in options:
            # An explicit URL wins over store/update routes.
            for key in ('model', 'update', 'store'):
                options.pop(key, None)
            options.setdefault('method', 'GET')
            return self.form.model(model, options)

        store, update = options.get('store'), options.get('update')

        if store is None and update is None:
            # Submit to the current URL.
            options.pop('model')
            return self.form.model(model, options)

        if model is not None and update is not None and self._model_exists(model):
            target = self._route_target(update)
            options[target] = [*self._as_list(update), self._route_key(model)]
            options['method'] = 'PUT'
        elif store is not None:
            target = self._route_target(store)
            options[target] = store
            options['method'] = 'POST'

        for key in ('model', 'update', 'store'):
            options.pop(key, None)

        return self.form.model(model, options)

    @staticmethod
    def _as_list(value) -> list:
        return list(value) if isinstance(value, (list, tuple)) else [value]

    def _route_target(self, route) -> str:
        name = self._as_list(route)[0]
        return 'action' if '@' in str(name) else 'route'

    @staticmethod
    def _route_key(model):
        get_route_key = getattr(model, 'get_route_key', None)
        if callable(get_route_key):
            return get_route_key()
        return data_get(model, 'id')

    def _model_exists(self, model) -> bool:
        exists = getattr(model, 'exists', None)
        if exists is not None:
            return bool(exists)
        return self._route_key(model) is not None

    def vertical(self, options=None) -> Markup:
        """Open a vertical (standard) Bootstrap form."""
        self.set_type(FormType.VERTICAL)
        return self.open({**(options or {}), 'class': FormType.VERTICAL.value})

    def inline(self, options=None) -> Markup:
        """Open an inline Bootstrap form."""
        self.set_type(FormType.INLINE)
        return self.open({**(options or {}), 'class': FormType.INLINE.value})

    def horizontal(self, options=None) -> Markup:
        """Open a horizontal Bootstrap form."""
        self.set_type(FormType.HORIZONTAL)
        return self.open({**(options or {}), 'class': FormType.HORIZONTAL.value})

    # Text-like fields

    def static_field(self, name, label=None, value=None, options=None) -> Markup:
        """Render a read-only value as ``<p class="form-control-static">``.

        Pass ``{"html": "..."}`` as the value to skip escaping.
        """
        if not self.is_allowed(name):
            return Markup('')

        options = {'class': 'form-control-static', **self._with_id(options, name)}

        if isinstance(value, Mapping) and 'html' in value:
            value = value['html']
        else:
            value = escape_html(value)

        label = self.get_label_title(label, name)
        element = f'<p{self.html.attributes(self._element_options(options))}>{value}</p>'
        wrapper = self._wrap(element, self.get_field_error(name), self.get_help_text(name, options))

        return self.get_form_group(name, label, wrapper)

    def text(self, name, label=None, value=None, options=None) -> Markup:
        return self._typed_input('text', name, label, value, options)

    def email(self, name='email', label=None, value=None, options=None) -> Markup:
        return self._typed_input('email', name, label, value, options)

    def url(self, name, label=None, value=None, options=None) -> Markup:
        return self._typed_input('url', name, label, value, options)

    def tel(self, name, label=None, value=None, options=None) -> Markup:
        return self._typed_input('tel', name, label, value, options)

    def number(self, name, label=None, value=None, options=None) -> Markup:
        return self._typed_input('number', name, label, value, options)

    def date(self, name, label=None, value=None, options=None) -> Markup:
        return self._typed_input('date', name, label, value, options)

    def time(self, name, label=None, value=None, options=None) -> Markup:
        return self._typed_input('time', name, label, value, options)

    def textarea(self, name, label=None, value=None, options=None) -> Markup:
        return self._typed_input('textarea', name, label, value, options)

    def password(self, name='password', label=None, options=None) -> Markup:
        """Password input; never prefilled."""
        return self._typed_input('password', name, label, None, options)

    def _typed_input(self, type, name, label, value, options) -> Markup:
        if not self.is_allowed(name):
            return Markup('')
        return self.input(type, name, label, value, self._with_id(options, name))

    def input(self, type, name, label=None, value=None, options=None) -> Markup:
        """Render any input type inside a form group.

        ``prefix`` and ``suffix`` options hold raw addon markup (see
        ``addon_text`` and friends) and wrap the control in an input group.
        """
        options = dict(options or {})
        label = self.get_label_title(label, name)

        field_options = self.get_field_options(self._element_options(options), name)

        prefix, suffix = options.get('prefix'), options.get('suffix')
        parts = []
        if prefix is not None:
            parts.append(prefix)

        if type == 'password':
            parts.append(self.form.password(name, field_options))
        elif type == 'textarea':
            parts.append(self.form.textarea(name, value, field_options))
        else:
            parts.append(self.form.input(type, name, value, field_options))

        if suffix is not None:
            parts.append(suffix)

        element = ''.join(str(p) for p in parts)
        if prefix is not None or suffix is not None:
            element = f'<div class="input-group">{element}</div>'

        wrapper = self._wrap(element, self.get_field_error(name), self.get_help_text(name, options))

        return self.get_form_group(name, label, wrapper)

    # Checkboxes and radios

    def checkbox(self, name, label=None, value=1, checked=None, options=None) -> Markup:
        if not self.is_allowed(name):
            return Markup('')

        options = self._with_id(options, name)
        element = self.checkbox_element(name, label, value, checked, False, options)
        wrapper = self._wrap(element, self.get_field_error(name), self.get_help_text(name, options), offset=True)

        return self.get_form_group(name, None, wrapper)

    def checkbox_element(self, name, label=None, value=1, checked=None, inline=False, options=None) -> Markup:
        """A single checkbox inside its label, without a form group."""
        label = None if label is False else self.get_label_title(label, name)

        label_options = {'class': 'checkbox-inline'} if inline else {}
        element = self.form.checkbox(name, value, checked, self._element_options(options))
        label_element = (
            f'<label{self.html.attributes(label_options)}>'
            f'{element}<span class="label-text">{escape_html(label)}</span>'
            '</label>'
        )

        if inline:
            return to_html_string(label_element)
        return to_html_string(f'<div class="checkbox animated-checkbox">{label_element}</div>')

    def checkboxes(self, name, label=None, choices=None, checked_values=None, inline=False, options=None) -> Markup:
        """A group of checkboxes; ``choices`` maps values to labels."""
        if not self.is_allowed(name):
            return Markup('')

        options = self._with_id(options, name)
        if checked_values is None:
            checked_values = []
        elif not isinstance(checked_values, (list, tuple, set)):
            checked_values = [checked_values]
        checked = {str(v) for v in checked_values}

        elements = ''.join(
            self.checkbox_element(name, choice_label, value, str(value) in checked, inline, options)
            for value, choice_label in choice_items(choices)
        )
        wrapper = self._wrap(elements, self.get_field_error(name), self.get_help_text(name, options))

        return self.get_form_group(name, label, wrapper)

    def radio(self, name, label=None, value=None, checked=None, options=None) -> Markup:
        if not self.is_allowed(name):
            return Markup('')

        options = self._with_id(options, name)
        element = self.radio_element(name, label, value, checked, False, options)
        wrapper = self._wrap(element, offset=True)

        return self.get_form_group(None, label, wrapper)

    def radio_element(self, name, label=None, value=None, checked=None, inline=False, options=None) -> Markup:
        """A single radio inside its label; the value defaults to the label."""
        label = None if label is False else self.get_label_title(label, name)
        value = label if value is None else value

        label_options = {'class': 'radio-inline'} if inline else {}
        element = self.form.radio(name, value, checked, self._element_options(options))
        label_element = (
            f'<label{self.html.attributes(label_options)}>'
            f'{element}<span class="label-text">{escape_html(label)}</span>'
            '</label>'
        )

        if inline:
            return to_html_string(label_element)
        return to_html_string(f'<div class="radio">{label_element}</div>')

    def radios(self, name, label=None, choices=None, checked_value=None, inline=False, options=None) -> Markup:
        if not self.is_allowed(name):
            return Markup('')

        options = self._with_id(options, name)
        elements = ''.join(
            self.radio_element(
                name,
                choice_label,
                value,
                checked_value is not None and str(value) == str(checked_value),
                inline,
                options,
            )
            for value, choice_label in choice_items(choices)
        )
        wrapper = self._wrap(
            elements,
            self.get_field_error(name),
            self.get_help_text(name, options),
            classes=['animated-radio-button'],
        )

        return self.get_form_group(name, label, wrapper)

    # Labels, buttons and files

    def label(self, name, value=None, options=None) -> Markup:
        """Render a control label.

        ``{"html": "..."}`` and ``Markup`` values are rendered unescaped.
        """
        options = self.get_label_options(options)

        escape = True
        if isinstance(value, Mapping) and 'html' in value:
            value = value['html']
            escape = False
        elif hasattr(value, '__html__'):
            value = value.__html__()
            escape = False

        return self.form.label(name, value, options, escape)

    def submit(self, value=None, options=None) -> Markup:
        return self._button('submit', value, options)

    def button(self, value=None, options=None) -> Markup:
        return self._button('button', value, options)

    def _button(self, kind, value, options) -> Markup:
        options = {'class': 'btn btn-primary', **(options or {})}
        if not self.is_allowed(options.get('id') or options.get('name')):
            return Markup('')

        if kind == 'submit':
            element = self.form.submit(value, options)
        else:
            element = self.form.button(value, options)

        return self.get_form_group(None, None, self._wrap(element, offset=True))

    def file(self, name, label=None, options=None) -> Markup:
        """File upload styled by bootstrap-filestyle."""
        if not self.is_allowed(name):
            return Markup('')

        label = self.get_label_title(label, name)
        options = {'class': 'filestyle', 'data-buttonBefore': 'true', **self._with_id(options, name)}
        options = self.get_field_options(options, name)

        element = self.form.file(name, self._element_options(options))
        wrapper = self._wrap(element, self.get_field_error(name), self.get_help_text(name, options))

        return self.get_form_group(name, label, wrapper)

    def hidden(self, name, value=None, options=None) -> Markup:
        return self.form.hidden(name, value, options)

    # Input group addons

    def addon_button(self, label, options=None) -> Markup:
        options = dict(options or {})
        attributes = {'class': 'btn', 'type': 'button', **options}
        if 'class' in options:
            attributes['class'] = f"{render_class(options['class'])} btn"

        return to_html_string(
            f'<div class="input-group-btn"><button{self.html.attributes(attributes)}>{label}</button></div>'
        )

    def addon_text(self, text, options=None) -> Markup:
        return to_html_string(
            f'<div class="input-group-addon"><span{self.html.attributes(options)}>{text}</span></div>'
        )

    def addon_icon(self, icon, options=None) -> Markup:
        options = dict(options or {})
        prefix = options.pop('prefix', None) or self.get_icon_prefix()

        return to_html_string(
            f'<div class="input-group-addon"><span{self.html.attributes(options)}>'
            f'<i class="{escape_html(prefix)}{escape_html(icon)}"></i></span></div>'
        )

    # Selects

    def select(self, name, label=None, choices=None, selected=None, options=None) -> Markup:
        if not self.is_allowed(name):
            return Markup('')

        label = self.get_label_title(label, name)
        options = self.get_field_options(self._with_id(options, name), name)

        element = self.form.select(name, choices, selected, self._element_options(options))
        wrapper = self._wrap(element, self.get_field_error(name), self.get_help_text(name, options))

        return self.get_form_group(name, label, wrapper)

    def selectize(self, name, label=None, choices=None, selected=None, options=None) -> Markup:
        """Single-item selectize select; the bound model's value wins over ``selected``."""
        if not self.is_allowed(name):
            return Markup('')

        options = self.get_field_options(self._with_id(options, name), name)

        model = self.form.get_model()
        if model is not None:
            selected = data_get(model, name)

        element = self.form.select(name, choices, selected, self._element_options(options))
        wrapper = self._wrap(element, self.get_field_error(name), self.get_help_text(name, options))

        return self.get_form_group(name, label, wrapper + selectize_script(name))

    def selectize_many(self, name, label=None, choices=None, selected=None, options=None) -> Markup:
        """Multi-select submitted as ``name[]``."""
        if not self.is_allowed(name):
            return Markup('')

        field_name = f'{name}[]'
        if selected is None:
            selected = []
        elif not isinstance(selected, (list, tuple, set)):
            selected = [selected]

        options = self.get_field_options(self._with_id(options, name), field_name)

        element = self.form.select(field_name, choices, list(selected), self._element_options(options))
        wrapper = self._wrap(element, self.get_field_error(field_name), self.get_help_text(field_name, options))
        script = selectize_many_script(js_identifier(name), name, selected)

        return self.get_form_group(name, label, wrapper + script)

    def selectize_ajax(self, name, label=None, route='', selected=None, options=None) -> Markup:
        """Single-item select whose options are fetched from ``<route>/<query>``."""
        if not self.is_allowed(name):
            return Markup('')

        options = self.get_field_options(self._with_id(options, name), name)

        model = self.form.get_model()
        if model is not None:
            selected = data_get(model, name)

        if isinstance(selected, (list, tuple)):
            initial = selected[0] if selected else None
        else:
            initial = selected

        element = self.form.select(f'{name}[]', [], selected, self._element_options(options))
        wrapper = self._wrap(element, self.get_field_error(name), self.get_help_text(name, options))

        return self.get_form_group(name, label, wrapper + selectize_ajax_script(name, route, initial))

    def sselectize(self, name, choices=None, selected=None, options=None) -> Markup:
        """Select or autocomplete whose data source is guessed from the field name.

        See ``DynamicSelect`` for the recognised options and heuristics.
        """
        if not self.is_allowed(name):
            return Markup('')
        return DynamicSelect(self, name, choices, selected, options).render()

    # Toggles

    def toggle(self, name, label=None, value=None, options=None, setting=None) -> Markup:
        """bootstrap-toggle switch; ``value`` is ``"on"`` or ``"off"``."""
        return self._toggle(name, label, value, options, setting)

    def toggle_flip(self, name, label=None, value=None, options=None, setting=None) -> Markup:
        return self._toggle(name, label, value, options, setting)

    def _toggle(self, name, label, value, options, setting) -> Markup:
        if not self.is_allowed(name):
            return Markup('')

        setting = {'off': 'Off', 'on': 'On', **(setting or {})}
        options = self._with_id(options, name)
        field_options = self.get_field_options(self._element_options(options), name)
        label = self.get_label_title(label, name)
        state = '' if value is None else str(value).lower()

        element = (
            f'<br/><input{self.html.attributes(field_options)} name="{escape_html(name)}" type="checkbox">'
            f'{toggle_script(name, setting, state)}'
        )

        return self.get_form_group(name, label, element)

    # Form groups

    def get_form_group(self, name=None, label=None, element='') -> Markup:
        """Wrap an element in a form group, with a label unless ``label`` is None."""
        options = self.get_form_group_options(name)
        label_element = '' if label is None else self.label(name or '', label)

        return to_html_string(f'<div{self.html.attributes(options)}>{label_element}{element}</div>')

    def get_form_group_options(self, name=None, options=None) -> dict:
        classes = ['form-group']
        if name:
            error_class = self.get_field_error_class(name)
            if error_class:
                classes.append(error_class)

        return {'class': ' '.join(classes), **(options or {})}

    def get_field_options(self, options=None, name=None) -> dict:
        """Add ``form-control`` to the class and default the id to the name."""
        options = dict(options or {})
        options['class'] = f"form-control {render_class(options.get('class'))}".strip()

        if name and 'id' not in options:
            options['id'] = name

        return options

    def get_label_options(self, options=None) -> dict:
        label_class = 'control-label'
        if self.is_horizontal():
            label_class = f'{label_class} {self.get_left_column_class()}'

        return {'class': label_class.strip(), **(options or {})}

    def get_label_title(self, label, name):
        """Label text: explicit, translated ``forms.<name>``, or the titled name.

        ``False`` means no label at all.
        """
        if label is False:
            return None

        key = f'forms.{name}'
        if label is None and self.translator.has(key):
            return self.translator.get(key)

        return label or title(name)

    def _wrap(self, *parts, offset=False, classes=None) -> str:
        classes = list(classes or [])
        if self.is_horizontal():
            if offset:
                classes.append(self.get_left_column_offset_class())
            classes.append(self.get_right_column_class())

        options = {'class': ' '.join(classes)} if classes else {}
        return f'<div{self.html.attributes(options)}>{"".join(str(p) for p in parts if p)}</div>'

    @staticmethod
    def _with_id(options, name) -> dict:
        options = {k: v for k, v in (options or {}).items() if k != 'id'}
        options['id'] = name
        return options

    @staticmethod
    def _element_options(options) -> dict:
        return {k: v for k, v in (options or {}).items() if k not in _HELPER_OPTIONS}

    # Layout settings

    def get_type(self) -> str:
        return self.type or self.config.type

    def set_type(self, type):
        self.type = type.value if isinstance(type, FormType) else type

    def is_horizontal(self) -> bool:
        return self.get_type() == FormType.HORIZONTAL.value

    def get_left_column_class(self) -> str:
        return self.left_column_class or self.config.left_column_class

    def set_left_column_class(self, value):
        self.left_column_class = value

    def get_left_column_offset_class(self) -> str:
        return self.left_column_offset_class or self.config.left_column_offset_class

    def set_left_column_offset_class(self, value):
        self.left_column_offset_class = value

    def get_right_column_class(self) -> str:
        return self.right_column_class or self.config.right_column_class

    def set_right_column_class(self, value):
        self.right_column_class = value

    def get_icon_prefix(self) -> str:
        return self.icon_prefix or self.config.icon_prefix

    def get_error_class(self) -> str:
        return self.error_class or self.config.error_class

    def get_error_bag(self) -> str | None:
        return self.error_bag or self.config.error_bag

    def set_error_bag(self, error_bag):
        self.error_bag = error_bag

    # Validation errors and help text

    @staticmethod
    def flatten_field_name(field: str) -> str:
        """Validator key of an input name: ``foo[]`` → ``foo``, ``foo[bar][0]`` → ``foo.bar.0``."""
        return re.sub(r'\[(.*?)\]', lambda m: f'.{m.group(1)}' if m.group(1) else '', field)

    def get_errors(self):
        """The error bag stored in the session under ``errors``, if any."""
        session = self.form.get_session_store()
        if session is None:
            return None

        errors = session.get('errors')
        if errors is None or isinstance(errors, (MessageBag, ViewErrorBag)):
            return errors
        if isinstance(errors, Mapping):
            return MessageBag(errors)

        logger.debug("Ignoring session errors of type %s", type(errors).__name__)
        return None

    def get_field_error(self, field, format=DEFAULT_ERROR_FORMAT) -> Markup:
        """First error of a field (all of them with ``show_all_errors``) in ``format``."""
        field = self.flatten_field_name(field)
        errors = self.get_errors()
        if not errors:
            return Markup('')

        bag_name = self.get_error_bag()
        if bag_name and isinstance(errors, ViewErrorBag):
            errors = errors.get_bag(bag_name)

        if self.config.show_all_errors:
            return to_html_string(''.join(errors.get(field, format)))

        return to_html_string(errors.first(field, format))

    def get_field_error_class(self, field) -> str | None:
        return self.get_error_class() if self.get_field_error(field) else None

    def get_help_text(self, field, options=None) -> Markup:
        options = options or {}
        if 'help_text' in options:
            return to_html_string(f'<span class="help-block">{escape_html(options["help_text"])}</span>')
        return Markup('')

    # Widget assets

    def has_loaded_asset(self, key: str) -> bool:
        return key in self.loaded_assets

    def mark_asset_loaded(self, key: str):
        self.loaded_assets.add(key)

    def reset_assets(self):
        """Forget emitted widget assets, e.g. at the start of a new request."""
        self.loaded_assets.clear()
