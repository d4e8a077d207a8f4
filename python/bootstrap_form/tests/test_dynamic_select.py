"""Test the dynamic select widget and its table/model guessing."""

import logging

import pytest

from bootstrap_form import InMemoryRecords, Route, Settings, UnsupportedWidgetError
from bootstrap_form.dynamic_select import DynamicSelect, SelectizeOptions


class Post:
    __tablename__ = "posts"


CATEGORIES = [{"id": 3, "name": "Books"}, {"id": 4, "name": "Music"}]


class TestSelectizeOptions:
    """Test option parsing."""

    def test_defaults(self):
        opts = SelectizeOptions()
        assert opts.type == "select"
        assert opts.multiple == "1"
        assert opts.limit == 10
        assert not opts.create
        assert not opts.is_multiple

    def test_keyword_aliases(self):
        opts = SelectizeOptions.model_validate({"from": "users.email", "except": [1, 2]})
        assert opts.from_ == "users.email"
        assert opts.except_ == [1, 2]

    @pytest.mark.parametrize("value,expected", [
        (True, "null"),
        ("true", "null"),
        ("5", "5"),
        (3, "3"),
        (False, "1"),
        ("false", "1"),
        (None, "1"),
    ])
    def test_multiple(self, value, expected):
        assert SelectizeOptions(multiple=value).multiple == expected

    @pytest.mark.parametrize("value,expected", [
        ("false", False),
        (False, False),
        (None, False),
        ("true", True),
        ("yes", True),
        (True, True),
    ])
    def test_flags(self, value, expected):
        assert SelectizeOptions(create=value).create is expected


class TestTableGuessing:
    """Test DynamicSelect.guess_table() and guess_url()."""

    def test_from_option(self, form):
        assert DynamicSelect(form, "x", options={"from": "users.email"}).guess_table() == ("users", "email")

    def test_explicit_table_and_field(self, form):
        select = DynamicSelect(form, "x", options={"from": "users.email", "table": "admins", "field": "login"})
        assert select.guess_table() == ("admins", "login")

    def test_id_suffix(self, form, context):
        context.tables = {"categories"}
        assert DynamicSelect(form, "category_id").guess_table() == ("categories", None)

    def test_id_suffix_without_matching_table(self, form, context):
        context.tables = {"posts"}
        assert DynamicSelect(form, "category_id").guess_table() == (None, None)

    def test_dotted_name_from_bound_model(self, form, form_builder, context):
        """Each segment that names a table moves the table along."""
        context.tables = {"posts", "authors", "countries"}
        form_builder.set_model(Post())
        assert DynamicSelect(form, "author.country").guess_table() == ("countries", None)
        assert DynamicSelect(form, "author.email").guess_table() == ("authors", "email")
        assert DynamicSelect(form, "title").guess_table() == ("posts", "title")

    def test_model_from_controller(self, form, context):
        context.tables = {"posts"}
        context.controller = "admin.PostController@edit"
        context.models = {"Admin.Post": Post}
        assert DynamicSelect(form, "title").guess_table() == ("posts", "title")

    def test_model_from_controller_without_namespace(self, form, context):
        context.tables = {"posts"}
        context.controller = "admin.PostController@edit"
        context.models = {"Post": Post}
        assert DynamicSelect(form, "title").guess_table() == ("posts", "title")

    def test_nothing_to_guess_from(self, form):
        assert DynamicSelect(form, "title").guess_table() == (None, None)

    @pytest.mark.parametrize("uri", ["admin/user_roles/list", "userRoles/list", "api/user-roles/list"])
    def test_url_from_routes(self, form, context, uri):
        form.config = Settings(app_url="http://app.test/")
        context.routes = [Route("user_roles/edit"), Route(uri, name="roles.list")]
        assert DynamicSelect(form, "x").guess_url("user_roles") == f"http://app.test/{uri}"

    def test_url_must_match_whole_segment(self, form, context):
        context.routes = [Route("super_roles/list")]
        assert DynamicSelect(form, "x").guess_url("roles") == ""

    def test_missing_route_is_logged(self, form, context, caplog):
        context.routes = []
        with caplog.at_level(logging.WARNING, logger="bootstrap_form.dynamic_select"):
            assert DynamicSelect(form, "category_id").guess_url("categories") == ""
        assert "No categories/list route" in caplog.text

    def test_unknown_routes_are_logged(self, form, caplog):
        with caplog.at_level(logging.WARNING, logger="bootstrap_form.dynamic_select"):
            assert DynamicSelect(form, "category_id").guess_url("categories") == ""
        assert "No categories/list route" in caplog.text

    def test_no_table_is_not_logged(self, form, caplog):
        with caplog.at_level(logging.WARNING, logger="bootstrap_form.dynamic_select"):
            assert DynamicSelect(form, "title").guess_url(None) == ""
        assert caplog.text == ""

    def test_explicit_url(self, form):
        assert DynamicSelect(form, "x", options={"url": "/custom"}).guess_url("categories") == "/custom"


class TestSelectedText:
    """Test lookup of the text shown for selected values."""

    @pytest.fixture(autouse=True)
    def categories(self, context):
        context.tables = {"categories"}
        context.records = {"categories": InMemoryRecords(CATEGORIES)}

    def test_numeric_value_is_looked_up_by_key(self, form):
        result = form.sselectize("category_id", selected=3, options={"url": "/categories/list"})
        assert '<option value="3" selected="selected">Books</option>' in result
        assert 'self.setValue(["3"], true);' in result

    def test_text_value_is_replaced_by_id(self, form):
        result = form.sselectize("category_id", selected="Music", options={"url": "/categories/list"})
        assert '<option value="4" selected="selected">Music</option>' in result

    def test_unknown_value_is_shown_as_is(self, form):
        result = form.sselectize("category_id", selected=99, options={"url": "/categories/list"})
        assert '<option value="99" selected="selected">99</option>' in result

    def test_value_from_bound_model(self, form, form_builder):
        form_builder.set_model({"category_id": 4})
        assert '<option value="4" selected="selected">Music</option>' in form.sselectize("category_id")

    def test_several_values(self, form):
        result = form.sselectize("category_id", selected=[3, 4], options={"multiple": True})
        assert '<option value="3" selected="selected">Books</option>' in result
        assert '<option value="4" selected="selected">Music</option>' in result
        assert 'self.setValue(["3", "4"], true);' in result

    def test_set_of_values(self, form):
        result = form.sselectize("category_id", selected={3}, options={"multiple": True})
        assert '<option value="3" selected="selected">Books</option>' in result
        assert 'self.setValue(["3"], true);' in result

    def test_registry_model_wins_over_table_records(self, form, context):
        context.models = {"Category": InMemoryRecords([{"id": 3, "name": "Novels"}])}
        assert ">Novels</option>" in form.sselectize("category_id", selected=3)

    def test_explicit_model_option(self, form, context):
        context.models = {"Shop.Category": InMemoryRecords([{"id": 3, "name": "Paperbacks"}])}
        result = form.sselectize("category_id", selected=3, options={"model": "Shop.Category"})
        assert ">Paperbacks</option>" in result

    def test_model_namespaced_by_route_name(self, form, context):
        context.routes = [Route("admin/categories", name="admin.categories.index")]
        context.models = {"Admin.Category": InMemoryRecords([{"id": 3, "name": "Comics"}])}
        assert ">Comics</option>" in form.sselectize("category_id", selected=3)


class TestRender:
    """Test the rendered element and script."""

    def test_select(self, form, context):
        context.tables = {"categories"}
        result = form.sselectize("category_id", options={"url": "/categories/list"})
        assert result.startswith(
            '<select id="category_id" name="category_id"></select>'
            '<script src="/bower_components/selectize/dist/js/standalone/selectize.js"></script>'
            '<script>'
        )
        assert '$("#category_id").selectize({' in result
        assert 'valueField: "id",' in result
        assert 'labelField: "name",' in result
        assert 'searchField: "name",' in result
        assert "create: false," in result
        assert "maxItems: 1," in result
        assert "preload: false," in result
        assert 'url: "/categories/list" + "?search=" + search + "&field=" + "name",' in result
        assert "page_limit: 10" in result
        assert result.endswith("</script>")

    def test_assets_are_emitted_once(self, form, context):
        context.tables = {"categories"}
        first = form.sselectize("category_id", options={"url": "/categories/list"})
        second = form.sselectize("category_id", options={"url": "/categories/list"})
        assert "selectize.js" in first
        assert 'head.load("/css/selectize.css");' in first
        assert "keyCode == 9" in first
        assert "selectize.js" not in second
        assert "head.load" not in second
        assert "keyCode == 9" not in second

        form.reset_assets()
        assert "selectize.js" in form.sselectize("category_id", options={"url": "/categories/list"})

    def test_asset_url(self, form):
        form.config = Settings(asset_url="https://cdn.test")
        result = form.sselectize("tag", options={"table": "tags", "url": "/tags/list"})
        assert '<script src="https://cdn.test/bower_components/selectize/dist/js/standalone/selectize.js">' in result

    def test_empty_url_warns_in_console(self, form):
        result = form.sselectize("tag", options={"table": "tags"})
        assert 'if ("" == "")' in result
        assert "Maybe you don\\u0027t have tags/list route?" in result

    def test_old_input_cannot_close_the_script(self, form, session):
        session["_old_input"] = {"tag": "</script><script>alert(1)</script>"}
        result = form.sselectize("tag", options={"table": "tags", "url": "/tags/list"})
        assert "</script><script>alert(1)" not in result
        assert '"\\u003c/script\\u003e\\u003cscript\\u003ealert(1)\\u003c/script\\u003e"' in result
        assert "&lt;/script&gt;&lt;script&gt;alert(1)" in result

    def test_no_warning_with_static_choices(self, form):
        result = form.sselectize("tag", {1: "red"}, options={"table": "tags"})
        assert "console.log" not in result
        assert 'valueField: "id",' in result

    def test_key_defaults_to_field(self, form):
        result = form.sselectize("tag", options={"table": "tags", "field": "label", "url": "/tags/list"})
        assert 'valueField: "label",' in result
        assert 'labelField: "label",' in result

    def test_display_is_value_without_url(self, form):
        assert 'labelField: "value",' in form.sselectize("tag", options={"table": "tags"})

    def test_multiple(self, form):
        result = form.sselectize("tags", options={"table": "tags", "url": "/tags/list", "multiple": True})
        assert result.startswith('<select multiple="multiple" id="tags" name="tags"></select>')
        assert "maxItems: null," in result

    def test_options_in_script(self, form):
        result = form.sselectize("tags", options={
            "table": "tags",
            "url": "/tags/list",
            "create": True,
            "preload": "true",
            "limit": 25,
            "except": [1, 2],
            "attributes": {"placeholder": "Pick a tag"},
            "js_options": {"onChange": "function () {}"},
            "js_attach": '.on("item_add", handler)',
            "js_render": '"<b>" + escape(item.name) + "</b>"',
        })
        assert '<option selected="selected" value="">Pick a tag</option>' in result
        assert "create: true," in result
        assert "preload: true," in result
        assert 'placeholder: "Pick a tag",' in result
        assert 'except: ["1", "2"],' in result
        assert "page_limit: 25" in result
        assert '"name\\u0026all_data=1"' in result
        assert "onChange: function () {}" in result
        assert '}).on("item_add", handler);' in result
        assert 'return "<b>" + escape(item.name) + "</b>";' in result

    def test_dotted_text_input_uses_hidden_field(self, form, form_builder, context):
        context.tables = {"posts", "authors"}
        form_builder.set_model(Post())
        result = form.sselectize("author.email", options={"type": "text"})
        assert result.startswith(
            '<input id="author-email_selectize" name="author.email" type="hidden">'
            '<input id="author_email" name="author-email_selectize" type="text">'
        )
        assert 'searchField: "email",' in result
        assert '$("#author-email_selectize").val($("#author_email").val());' in result

    def test_explicit_id_is_kept(self, form):
        result = form.sselectize("tag", options={"table": "tags", "attributes": {"id": "my.tag"}})
        assert '<select id="my.tag" name="tag">' in result
        assert '$("#my\\\\.tag").selectize({' in result
        assert "var mytag_data = [];" in result

    def test_textarea_textcomplete(self, form):
        result = form.sselectize("body", options={"type": "textarea", "table": "notes", "url": "/notes/list"})
        assert result.startswith('<textarea id="body" name="body" cols="50" rows="10"></textarea>')
        assert 'head.load("/bower_components/jquery-textcomplete/dist/jquery.textcomplete.js"' in result
        assert '$("#body").textcomplete([{' in result
        assert ".selectize(" not in result

    def test_textarea_autocomplete(self, form):
        result = form.sselectize(
            "body", options={"type": "textarea", "table": "notes", "url": "/notes/list", "textarea_full": True}
        )
        assert '<script src="/bower_components/jquery-auto-complete/jquery.auto-complete.js"></script>' in result
        assert '$("#body").autoComplete({' in result
        assert '"/notes/list?field=name"' in result
        assert "limit: 10" in result

    def test_unsupported_type(self, form):
        with pytest.raises(UnsupportedWidgetError) as exc_info:
            form.sselectize("tag", options={"type": "radio"})
        assert isinstance(exc_info.value, ValueError)
        assert "'radio'" in str(exc_info.value)

    def test_denied_field(self, html, form_builder, settings):
        from bootstrap_form import BootstrapForm

        class ReadOnlyForm(BootstrapForm):
            def is_allowed(self, element_id):
                return False

        assert ReadOnlyForm(html, form_builder, settings).sselectize("tag") == ""
