"""
Request schemas for the mosaic JSON API.
"""

from marshmallow import Schema, fields, validate, EXCLUDE


class RequestSchema(Schema):
    class Meta:
        unknown = EXCLUDE


class SessionCreateSchema(RequestSchema):
    """Optional property the deal is about"""
    property_context = fields.Dict(data_key='property', keys=fields.Str(), load_default=dict)


class FieldsUpdateSchema(RequestSchema):
    values = fields.Dict(keys=fields.Str(validate=validate.Length(min=1)), required=True)


class GotoSchema(RequestSchema):
    step_index = fields.Int(required=True)
