from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import StringField, IntegerField, BooleanField
from wtforms.validators import DataRequired, Optional, Length, URL

from catalog.errors import CategoryValidationError
from catalog.models.category import NAME_MAX_LENGTH, DESCRIPTION_MAX_LENGTH

# JSON body key -> form field name
JSON_FIELDS = {
    "name": "name",
    "description": "description",
    "imageUrl": "image_url",
    "parentId": "parent_id",
    "isActive": "is_active",
}

# Keys whose JSON value must be a real boolean
BOOLEAN_KEYS = frozenset({"isActive"})


def _strip(value):
    return value.strip() if isinstance(value, str) else value


class CategoryForm(FlaskForm):
    name = StringField(
        "Name",
        filters=[_strip],
        validators=[DataRequired(), Length(max=NAME_MAX_LENGTH)],
    )
    description = StringField(
        "Description",
        filters=[_strip],
        validators=[Optional(), Length(max=DESCRIPTION_MAX_LENGTH)],
    )
    image_url = StringField(
        "Image URL",
        filters=[_strip],
        validators=[Optional(), URL(require_tld=False, message="Please enter a valid image URL")],
    )
    parent_id = IntegerField("Parent", validators=[Optional()])
    is_active = BooleanField("Active", default=True)


class CategoryUpdateForm(CategoryForm):
    name = StringField(
        "Name", filters=[_strip], validators=[Optional(), Length(max=NAME_MAX_LENGTH)]
    )


def _form_value(key, value) -> str:
    if key in BOOLEAN_KEYS:
        if not isinstance(value, bool):
            raise CategoryValidationError(
                f"{key} must be true or false", {key: ["Must be true or false."]}
            )
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise CategoryValidationError(
        f"Invalid value for {key!r}", {key: ["Must be a string, number or boolean."]}
    )


def parse_category_json(form_class, payload) -> dict:
    """Validate a JSON body with ``form_class`` and return the supplied fields.

    Only keys present in ``payload`` end up in the result, keyed by model
    attribute name, so absent keys never overwrite stored values.
    """
    if not isinstance(payload, dict):
        raise CategoryValidationError("Request body must be a JSON object")

    present = {
        field: _form_value(key, payload[key])
        for key, field in JSON_FIELDS.items()
        if key in payload
    }
    form = form_class(formdata=MultiDict(present))
    if not form.validate():
        errors = {
            key: form.errors[field]
            for key, field in JSON_FIELDS.items()
            if field in form.errors
        }
        first = next(iter(errors.values()))[0] if errors else "Invalid category data"
        raise CategoryValidationError(first, errors)

    return {field: form[field].data for field in present}
