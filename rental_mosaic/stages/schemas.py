"""
Provider Response Schemas

marshmallow schemas applied to every provider answer before it reaches a
wizard. A payload that does not load is reported as ``invalid_response``.
"""

from marshmallow import Schema, fields, validate, EXCLUDE

RISK_LEVELS = ('low', 'medium', 'high')
ITEM_CONDITIONS = ('excellent', 'good', 'fair', 'poor')
LISTING_PLATFORMS = ('avito', 'cian', 'domclick', 'yandex', 'realty')


class ProviderSchema(Schema):
    """Base schema: extra keys from providers are dropped."""

    class Meta:
        unknown = EXCLUDE


class ScoringResponseSchema(ProviderSchema):
    score = fields.Int(required=True, strict=True, validate=validate.Range(min=0, max=1000))
    risk_level = fields.Str(required=True, validate=validate.OneOf(RISK_LEVELS))
    factors = fields.Dict(load_default=dict)
    bureau_data = fields.Dict(load_default=dict)
    recommendations = fields.List(fields.Str(), load_default=list)


class ContractResponseSchema(ProviderSchema):
    contract_id = fields.Str(required=True, validate=validate.Length(min=1))
    file_name = fields.Str(required=True)
    content = fields.Str(required=True)


class InventoryItemSchema(ProviderSchema):
    name = fields.Str(required=True, validate=validate.Length(min=1))
    category = fields.Str(load_default='other')
    condition = fields.Str(required=True, validate=validate.OneOf(ITEM_CONDITIONS))
    estimated_value = fields.Float(required=True, validate=validate.Range(min=0))
    confidence = fields.Float(load_default=1.0, validate=validate.Range(min=0, max=1))
    description = fields.Str(load_default='')


class PhotoAnalysisSchema(ProviderSchema):
    items = fields.List(fields.Nested(InventoryItemSchema), required=True)


class InventoryActSchema(ProviderSchema):
    act_id = fields.Str(required=True, validate=validate.Length(min=1))
    file_name = fields.Str(required=True)


class SignatureConfirmationSchema(ProviderSchema):
    signed = fields.Bool(required=True)
    signed_at = fields.Str(allow_none=True, load_default=None)
    certificate_id = fields.Str(allow_none=True, load_default=None)


class OptimizedContentSchema(ProviderSchema):
    title = fields.Str(required=True, validate=validate.Length(min=1))
    description = fields.Str(required=True, validate=validate.Length(min=1))
    tags = fields.List(fields.Str(), load_default=list)
    highlights = fields.List(fields.Str(), load_default=list)


class PublicationSchema(ProviderSchema):
    platform_id = fields.Str(required=True, validate=validate.OneOf(LISTING_PLATFORMS))
    published = fields.Bool(required=True)
    listing_url = fields.Str(allow_none=True, load_default=None)
    views = fields.Int(load_default=0, validate=validate.Range(min=0))
    contacts = fields.Int(load_default=0, validate=validate.Range(min=0))
