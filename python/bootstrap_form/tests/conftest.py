"""Shared fixtures: a facade wired to in-memory collaborators."""

import os

import pytest

from bootstrap_form import (
    AppContext,
    BootstrapForm,
    DictTranslator,
    FormBuilder,
    HtmlBuilder,
    Route,
    Settings,
    UrlGenerator,
)


ROUTES = [
    Route("users", name="users.store", action="UserController@store"),
    Route("users/{user}", name="users.update", action="UserController@update"),
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep developer BOOTSTRAP_FORM_* variables out of the tests."""
    for key in list(os.environ):
        if key.upper().startswith("BOOTSTRAP_FORM_"):
            monkeypatch.delenv(key)


@pytest.fixture
def html():
    return HtmlBuilder()


@pytest.fixture
def session():
    return {}


@pytest.fixture
def url_generator():
    return UrlGenerator(ROUTES, base_url="http://localhost", current_url="http://localhost/foo")


@pytest.fixture
def form_builder(html, url_generator, session):
    return FormBuilder(html, url_generator, csrf_token="abc", session=session)


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def translator():
    return DictTranslator()


@pytest.fixture
def context():
    return AppContext()


@pytest.fixture
def form(html, form_builder, settings, translator, context):
    return BootstrapForm(html, form_builder, settings, translator, context)
