"""Inline script snippets for the script-backed widgets.

Values are embedded as JSON literals with HTML-significant characters
escaped, so quotes, ``</script>`` or line separators in names, captions or
submitted input cannot break out of the string or the script element.
"""

import json
import re

__all__ = [
    'js_identifier',
    'js_string',
    'js_value',
    'selector',
    'selectize_ajax_script',
    'selectize_many_script',
    'selectize_script',
    'toggle_script',
]


_JS_ESCAPES = str.maketrans({
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "'": "\\u0027",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
})


def js_value(value) -> str:
    """JSON literal that is safe to place inside an inline <script> element."""
    return json.dumps(value).translate(_JS_ESCAPES)


def js_string(value) -> str:
    """Quote a value as a JavaScript string literal; None becomes ``""``."""
    return js_value('' if value is None else str(value))


def js_identifier(value: str) -> str:
    """Strip characters that are not allowed in a JavaScript variable name."""
    ident = re.sub(r'\W', '', value)
    return f'_{ident}' if ident[:1].isdigit() else ident


def selector(element_id: str) -> str:
    """jQuery id selector literal, with dots escaped for CSS."""
    return js_string('#' + element_id.replace('.', '\\.'))


def selectize_script(element_id: str) -> str:
    return f'''
<script>
    $(function() {{
        $({selector(element_id)}).selectize({{
            maxItems: 1
        }});
    }})
</script>
'''


def selectize_many_script(js_name: str, element_id: str, selected) -> str:
    values = js_value([str(v) for v in selected or []])
    return f'''
<script type="text/javascript">
    $(function() {{
        var {js_name} = $({selector(element_id)}).selectize({{
            allowEmptyOption: true,
            persist: false,
            maxItems: null
        }});
        {js_name}[0].selectize.clear();
        {js_name}[0].selectize.setValue({values});
    }})
</script>
'''


def selectize_ajax_script(element_id: str, route: str, initial) -> str:
    return f'''
<script>
    $(function() {{
        $({selector(element_id)}).selectize({{
            valueField: "id",
            labelField: "name",
            searchField: "name",
            options: [],
            persist: false,
            loadThrottle: 600,
            create: false,
            allowEmptyOption: false,
            maxItems: 1,
            render: {{
                item: function(item, escape) {{
                    return "<li>" +
                        (item.name ? "<span>" + escape(item.name) + "</span>" : "") +
                    "</li>";
                }},
                option: function(item, escape) {{
                    var label = item.name;
                    return "<li style=\\"display:block; padding-left:10px;\\">" + escape(label) + "</li>";
                }}
            }},
            load: function(query, callback) {{
                if (!query.length) return callback();
                $.ajax({{
                    url: {js_string(route + '/')} + encodeURIComponent(query),
                    type: "GET",
                    dataType: "json",
                    error: function() {{
                        callback();
                    }},
                    success: function(res) {{
                        callback(res);
                    }}
                }});
            }},
            onInitializeValue: function () {{
                $(this)[0].onSearchChange({js_string(initial)});
            }}
        }});
    }})
</script>
'''


def toggle_script(element_id: str, setting: dict, state: str) -> str:
    target = f'$({selector(element_id)})'
    lines = [
        f'{target}.bootstrapToggle({{',
        f'    on: {js_string(setting.get("on"))},',
        f'    off: {js_string(setting.get("off"))}',
        '});',
        f'{target}.bootstrapToggle({js_string(state)});',
        f'{target}.prop("checked", true);' if state == 'on' else f'{target}.removeProp("checked");',
    ]
    if setting.get('disabled') == 'disabled':
        lines.append(f'{target}.attr("disabled", "disabled");')
    body = '\n'.join(f'        {line}' for line in lines)
    return f'''
<script>
    $(function() {{
{body}
    }})
</script>'''
