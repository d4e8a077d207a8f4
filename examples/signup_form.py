"""
Sign-up form with server-side validation using Pydantic

Shows:
- Validating a submission with a Pydantic model
- Feeding the errors and old input back through the session
- A horizontal Bootstrap form with help text, addons and a toggle
- A dynamic select whose table and URL are guessed from the field name
"""

from pydantic import BaseModel, ValidationError, field_validator

from bootstrap_form import (
    AppContext,
    BootstrapForm,
    FormBuilder,
    HtmlBuilder,
    InMemoryRecords,
    MessageBag,
    Route,
    UrlGenerator,
)


class SignupForm(BaseModel):
    """User registration form model"""
    username: str
    email: str
    age: int
    country_id: int

    @field_validator('username')
    @classmethod
    def username_valid(cls, v: str) -> str:
        if len(v) < 3:
            raise ValueError('Username must be at least 3 characters')
        if not v.isalnum():
            raise ValueError('Username must be alphanumeric')
        return v

    @field_validator('age')
    @classmethod
    def age_valid(cls, v: int) -> int:
        if v < 13:
            raise ValueError('Must be at least 13 years old')
        return v


routes = [
    Route("signup", name="signup.store"),
    Route("countries/list", name="countries.list"),
]

context = AppContext(
    tables={"users", "countries"},
    routes=routes,
    records={"countries": InMemoryRecords([{"id": 1, "name": "Netherlands"}, {"id": 2, "name": "Belgium"}])},
)


def render(session: dict) -> str:
    """Render the sign-up form for the current session"""
    html = HtmlBuilder()
    urls = UrlGenerator(routes, base_url="https://example.com", current_url="https://example.com/signup")
    form = BootstrapForm(html, FormBuilder(html, urls, csrf_token="token", session=session), context=context)

    return "\n".join([
        form.horizontal({"route": "signup.store"}),
        form.text("username", options={"help_text": "Letters and digits only"}),
        form.email(options={"prefix": form.addon_icon("envelope")}),
        form.number("age"),
        form.sselectize("country_id"),
        form.toggle("newsletter", "Newsletter", "on"),
        form.submit("Sign up"),
        form.close(),
    ])


def submit(data: dict) -> dict:
    """Validate a submission; return the session for the next request"""
    try:
        SignupForm.model_validate(data)
    except ValidationError as e:
        return {"errors": MessageBag.from_validation_error(e), "_old_input": data}
    return {}


if __name__ == "__main__":
    session = submit({"username": "al", "email": "al@example.com", "age": 9, "country_id": 2})
    print(render(session))
