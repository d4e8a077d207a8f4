"""Test escaping and attribute rendering."""

from markupsafe import Markup

from bootstrap_form.html import HtmlBuilder, escape_html, render_attr, render_class, to_html_string


class TestEscapeHtml:
    """Test escape_html()."""

    def test_escapes_special_characters(self):
        """All five HTML special characters are replaced."""
        assert escape_html("<a href=\"x\">Tom & 'Jerry'</a>") == (
            "&lt;a href=&quot;x&quot;&gt;Tom &amp; &#x27;Jerry&#x27;&lt;/a&gt;"
        )

    def test_markup_passes_through(self):
        """Values that are already safe are not escaped twice."""
        assert escape_html(Markup("<b>bold</b>")) == "<b>bold</b>"

    def test_none_is_empty(self):
        assert escape_html(None) == ""

    def test_numbers_are_stringified(self):
        assert escape_html(42) == "42"


class TestRenderAttr:
    """Test render_attr()."""

    def test_true_renders_bare_name(self):
        assert render_attr("disabled", True) == " disabled"

    def test_false_and_none_render_nothing(self):
        assert render_attr("disabled", False) == ""
        assert render_attr("disabled", None) == ""

    def test_value_is_escaped(self):
        assert render_attr("title", 'say "hi"') == ' title="say &quot;hi&quot;"'


class TestRenderClass:
    """Test render_class()."""

    def test_mixed_values(self):
        """Strings, truthy dict keys and nested lists are joined in order."""
        assert render_class("btn", {"active": True, "disabled": False}, ["lg", ["xl"]]) == "btn active lg xl"

    def test_empty_values_are_skipped(self):
        assert render_class(None, "", [], "a") == "a"


class TestHtmlBuilder:
    """Test HtmlBuilder.attributes()."""

    def test_keeps_insertion_order(self):
        attributes = HtmlBuilder().attributes({"class": "form-control", "id": "email", "name": "email"})
        assert attributes == ' class="form-control" id="email" name="email"'

    def test_empty_gives_empty_string(self):
        assert HtmlBuilder().attributes({}) == ""
        assert HtmlBuilder().attributes(None) == ""

    def test_boolean_attributes(self):
        """True renders the bare name, False and None are dropped."""
        attributes = HtmlBuilder().attributes({"required": True, "disabled": False, "placeholder": None})
        assert attributes == " required"

    def test_integer_keys_render_bare_values(self):
        assert HtmlBuilder().attributes({0: "autofocus", "id": "q"}) == ' autofocus id="q"'

    def test_boolean_value_attribute(self):
        """A boolean value attribute renders as 1 or an empty string."""
        assert HtmlBuilder().attributes({"value": True}) == ' value="1"'
        assert HtmlBuilder().attributes({"value": False}) == ' value=""'

    def test_class_list(self):
        assert HtmlBuilder().attributes({"class": ["a", {"b": True, "c": False}]}) == ' class="a b"'


class TestToHtmlString:
    """Test to_html_string()."""

    def test_returns_markup(self):
        result = to_html_string("<p>x</p>")
        assert isinstance(result, Markup)
        assert str(result) == "<p>x</p>"
