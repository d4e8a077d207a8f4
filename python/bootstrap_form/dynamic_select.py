"""Select and autocomplete widget that guesses its data source.

``BootstrapForm.sselectize`` renders a selectize control (or, for textareas,
an autocomplete) whose options are loaded from a ``<table>/list`` endpoint.
Most of its configuration is guessed from the field name:

    form.sselectize('category_id')           # table "categories", key "id"
    form.sselectize('author.country.name')   # walks tables from the bound model
    form.sselectize('tags', options={'from': 'tags.label', 'multiple': True})

Every guess can be overridden through ``SelectizeOptions``.
"""

import logging
import re
from typing import Any

from markupsafe import Markup
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .context import data_get, model_table
from .errors import UnsupportedWidgetError
from .form_builder import choice_items
from .html import to_html_string
from .scripts import js_identifier, js_string, js_value, selector
from .strings import camel, plural, singular, studly

__all__ = ["DynamicSelect", "SelectizeOptions", "WIDGET_TYPES"]

logger = logging.getLogger(__name__)

WIDGET_TYPES = ('select', 'text', 'password', 'textarea')

SELECTIZE_JS = 'bower_components/selectize/dist/js/standalone/selectize.js'
SELECTIZE_CSS = ('bower_components/selectize/dist/css/selectize.bootstrap3.css', 'css/selectize.css')
AUTOCOMPLETE_JS = 'bower_components/jquery-auto-complete/jquery.auto-complete.js'
AUTOCOMPLETE_CSS = (
    'bower_components/jquery-auto-complete/jquery.auto-complete.css',
    'css/selectize.css',
    'bower_components/highlightjs/styles/default.css',
    'bower_components/highlightjs/highlight.pack.min.js',
)
TEXTCOMPLETE_JS = 'bower_components/jquery-textcomplete/dist/jquery.textcomplete.js'

# Tab and shift-tab between selectize controls and plain inputs.
TAB_NAVIGATION_SCRIPT = '''
    $(function () {
        $(":input").filter(function () {
            if (this.id != "")
                return this.id.match(/selectized$/);
            return false;
        }).on("keydown", function (e) {
            var keyCode = e.keyCode || e.which;

            if (keyCode == 9) {
                e.preventDefault();
                var inputs = $("div.selectize-control.form-control,:input:not(.selectized):not([type=hidden])").filter(":visible").filter(function () {
                    if (this.id != "")
                        return !this.id.match(/selectized$/);
                    return true;
                });
                var add_to_index = e.shiftKey ? -1 : 1;

                var tab_to = null;
                for (var i = 0; i < inputs.length; ++i) {
                    if ($(e.target).parents(".form-control")[0] == inputs[i]) {
                        var tab_to_index = i + add_to_index;
                        if (tab_to_index >= inputs.length)
                            tab_to = inputs[0];
                        else if (tab_to_index < 0)
                            tab_to = inputs[inputs.length - 1];
                        else
                            tab_to = inputs[tab_to_index];
                        break;
                    }
                }
                if ($(tab_to).is(":input"))
                    $(tab_to).focus();
                else
                    $(tab_to).find(":input").focus();
            }
        });
    });
'''


def _flag(value) -> bool:
    if isinstance(value, str):
        return value.lower() != 'false'
    return value is not None and value is not False


class SelectizeOptions(BaseModel):
    """Options accepted by ``sselectize``.

    ``from`` and ``except`` are Python keywords, so pass them through a dict
    (``{"from": "users.email"}``) or use ``from_``/``except_``.
    """

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True, extra='ignore')

    from_: str | None = Field(default=None, alias='from')
    type: str = 'select'
    table: str | None = None
    field: str | None = None
    key: str | None = None
    display: str | None = None
    create: bool = False
    multiple: str = '1'
    js_options: dict[str, str] = Field(default_factory=dict)
    js_attach: str | None = None
    except_: list[Any] = Field(default_factory=list, alias='except')
    js_render: str | None = None
    all_data: bool = False
    model: Any = None
    url: str | None = None
    textarea_full: bool = False
    attributes: dict[str, Any] = Field(default_factory=dict)
    preload: bool = False
    limit: int = 10

    @field_validator('create', 'all_data', 'textarea_full', 'preload', mode='before')
    @classmethod
    def parse_flag(cls, v):
        """Anything but False, None and "false" switches a flag on"""
        return _flag(v)

    @field_validator('multiple', mode='before')
    @classmethod
    def parse_multiple(cls, v):
        """Selectize ``maxItems``: "1" for single, "null" for unlimited, or a digit limit"""
        if not _flag(v):
            return '1'
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        if isinstance(v, str) and v.isdigit():
            return v
        return 'null'

    @property
    def is_multiple(self) -> bool:
        return self.multiple != '1'


class DynamicSelect:
    """One rendering of the dynamic select widget.

    Args:
        bootstrap_form: The facade; supplies the form builder, configuration,
            application context and emitted-asset flags.
        name: Input name, possibly dotted (``author.country.name``) or
            ending in ``_id``.
        choices: Static ``<option>`` choices. When given, the key is ``id``.
        selected: Selected value(s); the builder's value when empty.
        options: ``SelectizeOptions`` or a dict of them.
    """

    def __init__(self, bootstrap_form, name, choices=None, selected=None, options=None):
        self.bootstrap_form = bootstrap_form
        self.form = bootstrap_form.form
        self.config = bootstrap_form.config
        self.context = bootstrap_form.context
        self.name = name
        self.choices = choices
        self.selected = selected
        if isinstance(options, SelectizeOptions):
            self.opts = options
        else:
            self.opts = SelectizeOptions.model_validate(options or {})

    def render(self) -> Markup:
        opts = self.opts
        if opts.type not in WIDGET_TYPES:
            raise UnsupportedWidgetError(opts.type, self.name)

        table, field = self.guess_table()
        field = field or 'name'
        url = self.guess_url(table)

        has_options = bool(self.choices)
        if opts.key is not None:
            key = opts.key
        elif re.search(r'_id[\[\]]*', self.name) or has_options or opts.is_multiple:
            key = 'id'
        else:
            key = field

        if opts.display is not None:
            display = opts.display
        elif opts.is_multiple or url:
            display = field
        else:
            display = 'value'

        choices, selected_value = self.resolve_selected(table, key, field)

        attributes = dict(opts.attributes)
        if opts.is_multiple:
            attributes['multiple'] = 'multiple'
        placeholder = attributes.get('placeholder')

        id_set = 'id' in attributes
        if not id_set:
            attributes['id'] = re.sub(r'[\[\]]', '_', self.name).replace('.', '_')
        element_id = attributes['id']

        output = []
        element_name = self.name
        element_value = selected_value
        hidden_id = None

        if not id_set and opts.type != 'select' and (key != field or '.' in self.name):
            # The visible control gets its own name; a hidden field submits the value.
            hidden_id = re.sub(r'[\[\]]', '_', self.name).replace('.', '-') + '_selectize'
            if opts.type == 'textarea':
                output.append(self.form.textarea(self.name, selected_value, {'id': hidden_id, 'style': 'display:none'}))
            else:
                output.append(self.form.hidden(self.name, selected_value, {'id': hidden_id}))
            element_name = hidden_id
            element_value = dict(choice_items(choices)).get(selected_value) if _is_scalar(selected_value) else None

        match opts.type:
            case 'select':
                output.append(self.form.select(element_name, choices, selected_value, attributes))
            case 'text':
                output.append(self.form.text(element_name, element_value, attributes))
            case 'password':
                output.append(self.form.input('password', element_name, element_value, attributes))
            case 'textarea':
                output.append(self.form.textarea(element_name, element_value, attributes))

        script_context = {
            'element_id': element_id,
            'hidden_id': hidden_id,
            'table': table,
            'field': field,
            'key': key,
            'display': display,
            'url': url,
            'placeholder': placeholder,
            'selected_value': selected_value,
            'has_options': has_options,
        }
        if opts.type != 'textarea':
            output.append(self.selectize_script(**script_context))
        elif opts.textarea_full:
            output.append(self.autocomplete_script(**script_context))
        else:
            output.append(self.textcomplete_script(**script_context))

        return to_html_string(''.join(str(part) for part in output))

    # Guessing

    def guess_table(self):
        """Return ``(table, field)``; the field is None unless the name or options name one."""
        opts = self.opts
        table, field = None, None

        if opts.from_:
            parts = opts.from_.split('.')
            if len(parts) >= 2:
                table, field = parts[-2], parts[-1]
            else:
                table = opts.from_

        table = opts.table or table
        field = opts.field or field

        if table:
            return table, field

        if re.search(r'_id$', self.name) and self.context.has_schema:
            candidate = plural(re.sub(r'_id[\[\]]*', '', self.name))
            if self.context.has_table(candidate):
                table = candidate
            elif self.context.has_table(plural(candidate)):
                table = plural(candidate)
            logger.debug("Guessed table %r for %s from its _id suffix", table, self.name)
            return table, field

        base_model = self.form.get_model() or self.guess_controller_model()
        if base_model is None:
            logger.debug("No model to guess the table of %s from", self.name)
            return None, field

        table = model_table(base_model)
        for segment in self.name.split('.'):
            if self.context.has_table(segment):
                table = segment
            elif self.context.has_table(plural(segment)):
                table = plural(segment)
            else:
                if field is None:
                    field = segment
                break

        logger.debug("Guessed table %r and field %r for %s", table, field, self.name)
        return table, field

    def guess_controller_model(self):
        """Model named after the current controller, namespaced first, then bare.

        ``admin.UserController@index`` tries ``Admin.User`` then ``User``.
        """
        controller = self.context.controller
        if not controller:
            return None

        stripped = re.sub(r'Controller(@\w*)?$', '', controller)
        namespaced = '.'.join(studly(segment) for segment in stripped.split('.'))
        model = self.context.find_model(namespaced)
        if model is None and '.' in namespaced:
            model = self.context.find_model(namespaced.rsplit('.', 1)[-1])
        return model

    def guess_url(self, table) -> str:
        if self.opts.url is not None:
            return self.opts.url
        if not table:
            return ''

        if self.context.has_routes:
            candidates = {table, camel(table), table.replace('_', '-')}
            pattern = re.compile(r'(^|/)(%s)/list$' % '|'.join(re.escape(c) for c in candidates))
            for route in self.context.routes:
                if pattern.search(route.uri.strip('/')):
                    return f"{self.config.app_url}/{route.uri.lstrip('/')}"

        logger.warning("No %s/list route for field %s; autocomplete URL is empty", table, self.name)
        return ''

    # Selected value

    def resolve_selected(self, table, key, field):
        """Return the ``(choices, selected_value)`` to render.

        When a table is known, selected values are looked up so the control
        can show their text. Digit values are matched on the key, others on
        the field (and replaced by the record id).
        """
        choices = self.choices
        selected_value = self.selected or self.form.get_value_attribute(self.name)

        if not selected_value or not table:
            return choices, selected_value

        source = self.record_source(table)
        values = selected_value if isinstance(selected_value, (list, tuple, set)) else [selected_value]

        resolved = {}
        for value in values:
            value, text = self._lookup(source, value, key, field)
            resolved[value] = text

        if isinstance(selected_value, (list, tuple, set)):
            selected_value = list(resolved)
        else:
            selected_value = next(iter(resolved))

        return resolved, selected_value

    def _lookup(self, source, value, key, field):
        if source is None:
            return value, value

        if str(value).strip().isdigit():
            record = source.first_where(key, int(str(value).strip()))
            if record is None:
                return value, value
            return value, data_get(record, field, value)

        record = source.first_where(field, value)
        if record is None:
            return value, value
        return data_get(record, 'id', value), data_get(record, field, value)

    def record_source(self, table):
        """Find something with ``first_where`` that holds the rows of ``table``."""
        model = self.opts.model
        if isinstance(model, str):
            model = self.context.find_model(model)
        if model is not None:
            return model

        model_name = studly(singular(table))
        model = self.context.find_model(model_name)
        if model is not None:
            return model

        model = self._find_namespaced_model(table, model_name)
        if model is not None:
            return model

        source = self.context.records_for(table)
        if source is None:
            logger.debug("No record source for table %s", table)
        return source

    def _find_namespaced_model(self, table, model_name):
        if not self.context.has_routes:
            return None
        for route in self.context.routes:
            if route.name and re.search(r'(^|/)%s$' % re.escape(table), route.uri.strip('/')):
                prefix = route.name.split(table, 1)[0]
                namespace = '.'.join(studly(s) for s in prefix.strip('.').split('.') if s)
                return self.context.find_model(f'{namespace}.{model_name}' if namespace else model_name)
        return None

    # Scripts

    def _load_once(self, key) -> bool:
        """True the first time an asset group is requested on this form."""
        if self.bootstrap_form.has_loaded_asset(key):
            return False
        self.bootstrap_form.mark_asset_loaded(key)
        return True

    def _url_warning(self, url, table) -> str:
        message = js_string(f"Warning: URL is empty. Maybe you don't have {table or ''}/list route?")
        return f'''
    if ({js_string(url)} == "")
        console.log({message});'''

    def selectize_script(self, element_id, hidden_id, table, field, key, display, url,
                         placeholder, selected_value, has_options) -> str:
        opts = self.opts
        first = self._load_once('selectize')
        target = selector(element_id)
        data_var = f'{js_identifier(element_id)}_data'
        values = _selected_list(selected_value)

        parts = []
        if first:
            parts.append(f'<script src="{self.config.asset(SELECTIZE_JS)}"></script>')
        parts.append('<script>')
        if not has_options:
            parts.append(self._url_warning(url, table))

        placeholder_line = f'\n        placeholder: {js_string(placeholder)},' if placeholder else ''
        render = opts.js_render or f'"<div>" + escape(item[{js_string(field)}]) + "</div>"'
        all_data = '&all_data=1' if opts.js_options or opts.all_data else ''
        extra = ''.join(f',\n        {name}: {code}' for name, code in opts.js_options.items())

        parts.append(f'''
    var {data_var} = [];
    $({target}).selectize({{
        persist: true,
        valueField: {js_string(key)},
        labelField: {js_string(display)},
        searchField: {js_string(field)},
        create: {_js_bool(opts.create)},
        maxItems: {opts.multiple},{placeholder_line}
        createOnBlur: true,
        openOnFocus: true,
        preload: {_js_bool(opts.preload)},
        render: {{
            option: function(item, escape) {{
                {data_var}.push(item);
                return {render};
            }}
        }},
        load: function (query, callback) {{
            if ({js_string(url)} == "")
                return true;
            var self = this;
            var search = {js_string(field)};
            if (!$({target}).data("inited_already"))
                search = {js_string(key)};
            $.when($.ajax({{
                url: {js_string(url)} + "?search=" + search + "&field=" + {js_string(field + all_data)},
                type: "GET",
                data: {{
                    except: {js_value([str(e) for e in opts.except_])},
                    query: query,
                    page_limit: {opts.limit}
                }},
                error: function() {{
                    callback();
                }},
                success: function(res) {{
                    res = JSON.parse(res);
                    callback(res.results);
                }}
            }})).then(function () {{
                if (!$({target}).data("inited_already")) {{
                    $({target}).data("inited_already", true);
                    self.setValue({js_value(values)}, true);
                }}
            }});
        }},
        onInitialize: function () {{
            $(this)[0].onSearchChange({js_string(', '.join(values))});
        }},
        onItemAdd: function (event, item) {{
            var text = $(item).text();
            var all_data = {data_var};
            var data = null;
            for (var i = 0; i < all_data.length; ++i) {{
                if (all_data[i][{js_string(display)}] == text)
                    data = all_data[i];
            }}
            if (data)
                $({target}).trigger("item_add", data);
        }}{extra}
    }}){opts.js_attach or ''}''')

        if hidden_id:
            parts.append(f'''.on("change", function () {{
        $({selector(hidden_id)}).val($({target}).val());
    }});''')
        else:
            parts.append(';')

        if first:
            parts.extend(f'\n    head.load("{self.config.asset(path)}");' for path in SELECTIZE_CSS)
            parts.append(TAB_NAVIGATION_SCRIPT)
        parts.append('</script>')

        return ''.join(parts)

    def autocomplete_script(self, element_id, hidden_id, table, field, key, display, url,
                            placeholder, selected_value, has_options) -> str:
        opts = self.opts
        first = self._load_once('jquery-auto-complete')
        target = selector(element_id)
        xhr = f'xhr_{js_identifier(element_id)}'
        all_data = '&all_data=1' if opts.js_options else ''
        placeholder_line = f'\n        placeholder: {js_string(placeholder)},' if placeholder else ''
        extra = ''.join(f',\n        {name}: {code}' for name, code in opts.js_options.items())
        value_target = selector(hidden_id) if hidden_id else target

        parts = []
        if first:
            parts.append(f'<script src="{self.config.asset(AUTOCOMPLETE_JS)}"></script>')
        parts.append('<script>')
        parts.append(self._url_warning(url, table))
        parts.append(f'''
    var {xhr};
    $({target}).autoComplete({{
        minChars: 0,
        cache: false,{placeholder_line}
        source: function (term, response) {{
            try {{ {xhr}.abort(); }} catch (e) {{}}
            {xhr} = $.getJSON(
                {js_string(url + '?field=' + field + all_data)},
                {{ query: term, limit: {opts.limit} }},
                function (data) {{
                    response(data.results);
                }}
            );
        }},
        renderItem: function (item, search) {{
            return "<div class=\\"autocomplete-suggestion\\" data-key=\\"" + item[{js_string(key)}] + "\\"><pre class=\\"bash hljs\\">" + item[{js_string(field)}] + "</pre></div>";
        }}{extra},
        onSelect: function (e, term, item) {{
            var data_key = $(item).attr("data-key");
            $({value_target}).val(data_key ? data_key : item.text());
            $({target}).val(item.text());
        }}
    }});''')

        if hidden_id:
            parts.append(f'''
    $({target}).on("keyup", function () {{
        $({selector(hidden_id)}).text($({target}).val());
    }});''')

        if first:
            parts.extend(f'\n    head.load("{self.config.asset(path)}");' for path in AUTOCOMPLETE_CSS)
        parts.append('''
    $(function () {
        $("pre").each(function(i, block) {
            hljs.highlightBlock(block);
        });
    });
</script>''')

        return ''.join(parts)

    def textcomplete_script(self, element_id, hidden_id, table, field, key, display, url,
                            placeholder, selected_value, has_options) -> str:
        self._load_once('jquery-textcomplete')
        target = selector(element_id)

        sync = ''
        if hidden_id:
            hidden = selector(hidden_id)
            sync = f'''
        $({target}).on("keyup change", function () {{
            $({hidden}).text($({target}).val());
        }});
        $({hidden}).on("keyup change", function () {{
            $({target}).text($({hidden}).val());
        }});'''

        return f'''<script>
    head.load("{self.config.asset(TEXTCOMPLETE_JS)}", function () {{
        $({target}).textcomplete([{{
            match: /.*(.{{1,}}).*$/g,
            cache: true,
            index: 0,
            search: function (term, callback, match) {{
                $.getJSON({js_string(url)}, {{ query: term, field: {js_string(field)} }})
                    .done(function (resp) {{
                        var lines = [];
                        for (var i = 0; i < resp.results.length; ++i) {{
                            var db_lines = resp.results[i].text.split("\\n");
                            for (var c = 0; c < db_lines.length; ++c) {{
                                if (db_lines[c].trim().indexOf(term) != -1)
                                    lines.push(db_lines[c].trim());
                            }}
                        }}
                        callback(lines);
                    }})
                    .fail(function () {{
                        callback([]);
                    }});
            }},
            replace: function (value) {{
                return value;
            }}
        }}],
        {{
            debounce: 250,
            onKeydown: function (e, commands) {{
                if (e.ctrlKey && e.keyCode === 74) {{ // CTRL-J
                    return commands.KEY_ENTER;
                }}
            }}
        }});{sync}
    }});
</script>'''


def _is_scalar(value) -> bool:
    return value is not None and not isinstance(value, (list, tuple, dict, set))


def _selected_list(value) -> list[str]:
    if value is None or value == '':
        return []
    if isinstance(value, (list, tuple, set)):
        return [str(v) for v in value]
    return [str(value)]


def _js_bool(value: bool) -> str:
    return 'true' if value else 'false'
