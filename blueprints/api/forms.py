"""
API payload forms using Flask-WTF.

JSON bodies are flattened into a MultiDict (camelCase keys become
snake_case field names) and validated with formdata=..., so the same
WTForms validators guard every flat payload.
"""

from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import StringField, FloatField, IntegerField
from wtforms.validators import DataRequired, Email, InputRequired, Length, NumberRange, Optional, AnyOf

from utils.validators import snake_case


def form_payload(payload) -> MultiDict:
    """
    Convert a JSON object into form data.

    Scalars are kept (booleans become 'true' / ''); null, list and object
    values are dropped, they are read from the raw JSON by the caller.
    """
    data = MultiDict()
    if not isinstance(payload, dict):
        return data
    for key, value in payload.items():
        if value is None or isinstance(value, (list, dict)):
            continue
        if isinstance(value, bool):
            value = 'true' if value else ''
        data[snake_case(key)] = str(value)
    return data


def first_error(form) -> str:
    """First validation message of a form, prefixed with the field label."""
    for field in form:
        if field.errors:
            return f'{field.label.text}: {field.errors[0]}'
    return 'Invalid request'


def present_fields(form, payload: dict) -> dict:
    """Validated data of the fields sent with a non-null value."""
    sent = {snake_case(key) for key, value in (payload or {}).items() if value is not None}
    return {name: field.data for name, field in form._fields.items() if name in sent}



class ClientForm(FlaskForm):
    """Client contact and billing data."""

    first_name = StringField('firstName', validators=[DataRequired(message='This field is required'), Length(max=100)])
    last_name = StringField('lastName', validators=[DataRequired(message='This field is required'), Length(max=100)])
    phone = StringField('phone', validators=[DataRequired(message='This field is required'), Length(max=30)])
    email = StringField('email', validators=[Optional(), Email(message='Invalid email format')])
    street = StringField('street', validators=[DataRequired(message='This field is required'), Length(max=200)])
    building_number = StringField('buildingNumber', validators=[DataRequired(message='This field is required'), Length(max=20)])
    postal_code = StringField('postalCode', validators=[DataRequired(message='This field is required'), Length(max=20)])
    city = StringField('city', validators=[DataRequired(message='This field is required'), Length(max=100)])
    company_name = StringField('companyName', validators=[Optional(), Length(max=200)])
    tax_id = StringField('taxId', validators=[Optional(), Length(max=30)])
    notes = StringField('notes', validators=[Optional()])


class ClientUpdateForm(ClientForm):
    """Partial client update; every field optional."""

    first_name = StringField('firstName', validators=[Optional(), Length(max=100)])
    last_name = StringField('lastName', validators=[Optional(), Length(max=100)])
    phone = StringField('phone', validators=[Optional(), Length(max=30)])
    street = StringField('street', validators=[Optional(), Length(max=200)])
    building_number = StringField('buildingNumber', validators=[Optional(), Length(max=20)])
    postal_code = StringField('postalCode', validators=[Optional(), Length(max=20)])
    city = StringField('city', validators=[Optional(), Length(max=100)])


class AttractionForm(FlaskForm):
    """Rentable attraction with dimensions (m), weight (kg) and price."""

    name = StringField('name', validators=[DataRequired(message='This field is required'), Length(max=200)])
    description = StringField('description', validators=[Optional()])
    width = FloatField('width', default=0, validators=[Optional(), NumberRange(min=0)])
    length = FloatField('length', default=0, validators=[Optional(), NumberRange(min=0)])
    height = FloatField('height', default=0, validators=[Optional(), NumberRange(min=0)])
    weight = FloatField('weight', default=0, validators=[Optional(), NumberRange(min=0)])
    price = FloatField('price', validators=[InputRequired(message='This field is required'), NumberRange(min=0)])
    setup_time = IntegerField('setupTime', default=0, validators=[Optional(), NumberRange(min=0)])
    image = StringField('image', validators=[Optional()])


class AttractionUpdateForm(AttractionForm):
    """Partial attraction update."""

    name = StringField('name', validators=[Optional(), Length(max=200)])
    price = FloatField('price', validators=[Optional(), NumberRange(min=0)])


class MaintenanceForm(FlaskForm):
    """Maintenance record for an attraction."""

    attraction_id = IntegerField('attractionId', validators=[InputRequired(message='This field is required'), NumberRange(min=1)])
    date = StringField('date', validators=[DataRequired(message='This field is required')])
    description = StringField('description', validators=[DataRequired(message='This field is required')])
    cost = FloatField('cost', default=0, validators=[Optional(), NumberRange(min=0)])
    performed_by = StringField('performedBy', validators=[DataRequired(message='This field is required'), Length(max=200)])


class DocumentForm(FlaskForm):
    """Document metadata; the file itself lives behind url."""

    name = StringField('name', validators=[DataRequired(message='This field is required'), Length(max=255)])
    type = StringField('type', validators=[DataRequired(message='This field is required'), Length(max=100)])
    size = IntegerField('size', default=0, validators=[Optional(), NumberRange(min=0)])
    url = StringField('url', validators=[DataRequired(message='This field is required'), Length(max=1000)])
    description = StringField('description', validators=[Optional()])
    related_type = StringField('relatedType', validators=[
        DataRequired(message='This field is required'),
        AnyOf(['attraction', 'reservation'], message='Must be attraction or reservation')
    ])
    related_id = IntegerField('relatedId', validators=[InputRequired(message='This field is required'), NumberRange(min=1)])
