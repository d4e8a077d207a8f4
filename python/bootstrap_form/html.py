"""HTML escaping and attribute rendering for form markup.

These functions back the HtmlBuilder collaborator that BootstrapForm and
FormBuilder use to turn option dictionaries into attribute strings.
"""

from markupsafe import Markup

__all__ = [
    'HtmlBuilder',
    'escape_html',
    'render_attr',
    'render_class',
    'to_html_string',
]

# Entities used for text content and double-quoted attribute values.
_ESCAPES = str.maketrans({
    '&': '&amp;',
    '<': '&lt;',
    '>': '&gt;',
    '"': '&quot;',
    "'": '&#x27;',
})


def escape_html(value) -> str:
    """Escape a label, option text or attribute value.

    None renders as an empty string, so missing values never show up as
    ``"None"`` inside a form. Objects with ``__html__`` (``Markup``, or the
    output of another helper) are trusted and returned as they are.

    Example:
        >>> escape_html('Tom & "Jerry"')
        'Tom &amp; &quot;Jerry&quot;'
        >>> escape_html(Markup('<span class="label-text">x</span>'))
        '<span class="label-text">x</span>'
    """
    if value is None:
        return ''
    if hasattr(value, '__html__'):
        return value.__html__()
    return str(value).translate(_ESCAPES)


def render_attr(name: str, value) -> str:
    """Render ``name="value"`` with a leading space.

    ``True`` gives a bare attribute (``required``); ``False`` and ``None``
    drop it entirely.

    Example:
        >>> render_attr("readonly", True)
        ' readonly'
        >>> render_attr("placeholder", None)
        ''
        >>> render_attr("id", "email")
        ' id="email"'
    """
    if value is True:
        return f' {name}'
    if value is None or value is False:
        return ''
    return f' {name}="{escape_html(value)}"'


def render_class(*values) -> str:
    """Flatten class names given as strings, lists or ``{name: enabled}`` dicts.

    Example:
        >>> render_class("form-group", {"has-error": True, "has-success": False})
        'form-group has-error'
    """
    classes = []
    for value in values:
        if not value:
            continue
        if isinstance(value, str):
            classes.append(value)
        elif isinstance(value, dict):
            classes.extend(name for name, enabled in value.items() if enabled)
        elif isinstance(value, (list, tuple)):
            nested = render_class(*value)
            if nested:
                classes.append(nested)
    return ' '.join(classes)


def to_html_string(html) -> Markup:
    """Mark finished markup as safe so templates do not escape it again."""
    return Markup(html)


class HtmlBuilder:
    """Renders attribute dictionaries into HTML attribute strings."""

    def attributes(self, attributes=None) -> str:
        """Build an HTML attribute string from a dictionary.

        Attributes keep their insertion order. Integer keys render their
        value as a bare attribute, so ``{0: "required"}`` gives ``required``.

        Args:
            attributes: Mapping of attribute names to values, or None.

        Returns:
            Rendered attributes with a leading space, or an empty string.

        Example:
            >>> HtmlBuilder().attributes({"class": "form-control", "id": "email"})
            ' class="form-control" id="email"'
            >>> HtmlBuilder().attributes({})
            ''
        """
        if not attributes:
            return ''
        parts = []
        for key, value in attributes.items():
            element = self.attribute_element(key, value)
            if element:
                parts.append(element)
        return ' ' + ' '.join(parts) if parts else ''

    def attribute_element(self, key, value) -> str:
        """Render one attribute without the leading space."""
        if isinstance(key, int):
            return escape_html(value) if value else ''
        if isinstance(value, bool):
            if key == 'value':
                return f'value="{1 if value else ""}"'
            return key if value else ''
        if key == 'class' and isinstance(value, (list, tuple, dict)):
            return f'class="{escape_html(render_class(value))}"'
        return render_attr(key, value).lstrip()
