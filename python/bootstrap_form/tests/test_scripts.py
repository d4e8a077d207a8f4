"""Test quoting of values embedded in inline scripts."""

import pytest

from bootstrap_form.scripts import js_identifier, js_string, js_value, selectize_many_script, selector


class TestJsString:
    """Test js_string()."""

    @pytest.mark.parametrize("value,expected", [
        ("abc", '"abc"'),
        (None, '""'),
        (3, '"3"'),
        ('say "hi"', '"say \\"hi\\""'),
        ("</script>", '"\\u003c/script\\u003e"'),
        ("a&b", '"a\\u0026b"'),
        ("don't", '"don\\u0027t"'),
        ("a\u2028b\u2029c", '"a\\u2028b\\u2029c"'),
    ])
    def test_quoting(self, value, expected):
        assert js_string(value) == expected

    def test_list_literal(self):
        assert js_value(["1", "</b>"]) == '["1", "\\u003c/b\\u003e"]'


class TestSelector:
    """Test selector() and js_identifier()."""

    def test_dots_are_escaped(self):
        assert selector("user.name") == '"#user\\\\.name"'

    def test_identifier(self):
        assert js_identifier("user.tags[]") == "usertags"
        assert js_identifier("1st") == "_1st"


class TestSelectizeManyScript:
    """Test selectize_many_script()."""

    def test_selected_values_are_escaped(self):
        result = selectize_many_script("tags", "tags", ["<x>"])
        assert "<x>" not in result
        assert 'setValue(["\\u003cx\\u003e"]);' in result
