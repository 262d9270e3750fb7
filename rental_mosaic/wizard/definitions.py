"""
Mosaic Wizard Definitions

The five wizards offered by the mosaic builder: rental contract, tenant
scoring, property inventory, digital signature and multi-listing.
"""

from typing import Dict, Any, Optional

from wtforms import ValidationError

from ..stages.builtin import (
    ContractGenerationStage, ScoringStage, PhotoAnalysisStage, InventoryActStage,
    SendVerificationCodeStage, ConfirmSignatureStage, ContentOptimizationStage,
    PublishListingStage,
)
from ..stages.schemas import ITEM_CONDITIONS, LISTING_PLATFORMS
from .steps import StepDefinition, WizardDefinition, as_date, as_number, is_blank

PASSPORT_PATTERN = r'[0-9]{4} ?[0-9]{6}'
PHONE_PATTERN = r'\+?[0-9 ()\-]{10,20}'
VERIFICATION_CODE_PATTERN = r'[0-9]{6}'
SIGNATURE_CHANNELS = ('sms', 'email', 'gosuslugi')
PROPERTY_TYPES = ('APARTMENT', 'HOUSE', 'STUDIO', 'COMMERCIAL', 'ROOM')

CONTRACT_TEMPLATES = {
    'standard': {
        'name': 'Standard rental agreement',
        'description': 'Base template for residential rentals',
        'is_default': True,
    },
    'premium': {
        'name': 'Premium rental agreement',
        'description': 'Extended template with additional terms',
        'is_default': False,
    },
}


# Cross-field checks

def rent_is_positive(values: Dict[str, Any]) -> Dict[str, str]:
    rent = as_number(values.get('monthly_rent'))
    if rent is None or rent <= 0:
        return {'monthly_rent': 'monthly_rent must be greater than 0'}
    return {}


def lease_dates_ordered(values: Dict[str, Any]) -> Dict[str, str]:
    start, end = as_date(values.get('start_date')), as_date(values.get('end_date'))
    if start is not None and end is not None and start >= end:
        return {'end_date': 'end_date must be after start_date'}
    return {}


# Field validators

def validate_inventory_items(items):
    if not isinstance(items, (list, tuple)):
        raise ValidationError('items must be a list')

    for index, item in enumerate(items, 1):
        if not isinstance(item, dict) or is_blank(item.get('name')):
            raise ValidationError(f'Item {index} must have a name')
        if item.get('condition') not in ITEM_CONDITIONS:
            raise ValidationError(f'Item {index} has an unknown condition')
        value = as_number(item.get('estimated_value'))
        if value is None or value < 0:
            raise ValidationError(f'Item {index} must have a non-negative estimated value')


def validate_photos(photos):
    if not isinstance(photos, (list, tuple)) or any(is_blank(photo) for photo in photos):
        raise ValidationError('photos must be a list of image references')


# Wizards

CONTRACT_WIZARD = WizardDefinition(
    wizard_id='contract',
    title='Rental contract',
    description='Builds a rental contract from a template',
    stage=ContractGenerationStage(),
    steps=[
        StepDefinition(
            name='template',
            title='Template',
            fields=['template_id'],
            required_fields=['template_id'],
            validation_rules={'template_id': {'choices': tuple(CONTRACT_TEMPLATES)}},
        ),
        StepDefinition(
            name='property',
            title='Property',
            fields=['property_title', 'property_address', 'property_type', 'monthly_rent', 'deposit', 'utilities'],
            required_fields=['property_title', 'property_address', 'property_type', 'monthly_rent'],
            validation_rules={
                'property_type': {'choices': PROPERTY_TYPES},
                'monthly_rent': {'min_value': 0},
                'deposit': {'min_value': 0},
            },
            checks=[rent_is_positive],
        ),
        StepDefinition(
            name='landlord',
            title='Landlord',
            fields=['landlord_name', 'landlord_passport', 'landlord_address'],
            required_fields=['landlord_name', 'landlord_passport', 'landlord_address'],
            validation_rules={'landlord_passport': {'pattern': PASSPORT_PATTERN}},
        ),
        StepDefinition(
            name='tenant',
            title='Tenant',
            fields=['tenant_name', 'tenant_passport', 'tenant_phone', 'tenant_email'],
            required_fields=['tenant_name', 'tenant_passport', 'tenant_phone', 'tenant_email'],
            validation_rules={
                'tenant_passport': {'pattern': PASSPORT_PATTERN},
                'tenant_phone': {'pattern': PHONE_PATTERN},
                'tenant_email': {'email': True},
            },
        ),
        StepDefinition(
            name='terms',
            title='Rental terms',
            fields=['start_date', 'end_date', 'additional_terms'],
            required_fields=['start_date', 'end_date'],
            validation_rules={
                'start_date': {'date': True},
                'end_date': {'date': True},
                'additional_terms': {'max_length': 5000},
            },
            checks=[lease_dates_ordered],
        ),
        StepDefinition(
            name='review',
            title='Review',
            fields=[],
            checks=[rent_is_positive, lease_dates_ordered],
        ),
    ],
)

SCORING_WIZARD = WizardDefinition(
    wizard_id='scoring',
    title='Tenant scoring',
    description='Credit bureau check of a prospective tenant',
    stage=ScoringStage(),
    steps=[
        StepDefinition(
            name='applicant',
            title='Applicant',
            fields=['full_name', 'passport', 'birth_date'],
            required_fields=['full_name', 'passport', 'birth_date'],
            validation_rules={
                'full_name': {'min_length': 2, 'max_length': 200},
                'passport': {'pattern': PASSPORT_PATTERN},
                'birth_date': {'past_date': True},
            },
        ),
    ],
)

INVENTORY_WIZARD = WizardDefinition(
    wizard_id='inventory',
    title='Property inventory',
    description='Photo inventory and hand-over act',
    stage=InventoryActStage(),
    steps=[
        StepDefinition(
            name='photos',
            title='Photos',
            fields=['photos'],
            required_fields=['photos'],
            validation_rules={'photos': {'custom': validate_photos}},
            stage=PhotoAnalysisStage(),
        ),
        StepDefinition(
            name='items',
            title='Items',
            fields=['items'],
            required_fields=['items'],
            validation_rules={'items': {'custom': validate_inventory_items}},
        ),
    ],
)

SIGNATURE_WIZARD = WizardDefinition(
    wizard_id='signature',
    title='Digital signature',
    description='Signs a document with a one-time code',
    stage=ConfirmSignatureStage(),
    steps=[
        StepDefinition(
            name='document',
            title='Document',
            fields=['document_id'],
            required_fields=['document_id'],
        ),
        StepDefinition(
            name='method',
            title='Signing method',
            fields=['signer_id', 'channel'],
            required_fields=['signer_id', 'channel'],
            validation_rules={'channel': {'choices': SIGNATURE_CHANNELS}},
            stage=SendVerificationCodeStage(),
        ),
        StepDefinition(
            name='verification',
            title='Verification',
            fields=['verification_code'],
            required_fields=['verification_code'],
            validation_rules={'verification_code': {'pattern': VERIFICATION_CODE_PATTERN}},
        ),
    ],
)

MULTILISTING_WIZARD = WizardDefinition(
    wizard_id='multilisting',
    title='Multi-listing',
    description='Optimises a listing and publishes it to several platforms',
    stage=PublishListingStage(),
    steps=[
        StepDefinition(
            name='draft',
            title='Draft',
            fields=['title', 'description', 'rooms', 'area'],
            required_fields=['title', 'description'],
            validation_rules={
                'title': {'max_length': 200},
                'rooms': {'min_value': 0},
                'area': {'min_value': 0},
            },
            stage=ContentOptimizationStage(),
        ),
        StepDefinition(
            name='content',
            title='Content',
            fields=['title', 'description', 'tags', 'highlights'],
            required_fields=['title', 'description'],
            validation_rules={'title': {'max_length': 200}},
        ),
        StepDefinition(
            name='platforms',
            title='Platforms',
            fields=['platform_ids'],
            required_fields=['platform_ids'],
            validation_rules={'platform_ids': {'choices': LISTING_PLATFORMS}},
        ),
    ],
)

WIZARDS = {
    wizard.wizard_id: wizard
    for wizard in (CONTRACT_WIZARD, SCORING_WIZARD, INVENTORY_WIZARD, SIGNATURE_WIZARD, MULTILISTING_WIZARD)
}

# Property context keys copied into the contract wizard
PROPERTY_PREFILL = {
    'title': 'property_title',
    'address': 'property_address',
    'type': 'property_type',
    'monthly_rent': 'monthly_rent',
    'deposit': 'deposit',
    'utilities': 'utilities',
}


def get_wizard(wizard_id: str) -> Optional[WizardDefinition]:
    return WIZARDS.get(wizard_id)


def initial_values(wizard_id: str,
                   property_context: Optional[Dict[str, Any]] = None,
                   module_data: Optional[Dict[str, Dict[str, Any]]] = None) -> Dict[str, Any]:
    """
    Values pre-filled when a wizard is opened

    The contract wizard starts from the session's property and the default
    template; the signature wizard picks up the generated contract.
    """
    property_context = property_context or {}
    module_data = module_data or {}
    values: Dict[str, Any] = {}

    if wizard_id == 'contract':
        values['template_id'] = next(
            key for key, template in CONTRACT_TEMPLATES.items() if template['is_default'])
        for source, target in PROPERTY_PREFILL.items():
            if source in property_context:
                values[target] = property_context[source]

    elif wizard_id == 'signature':
        contract = module_data.get('contract') or {}
        if contract.get('contract_id'):
            values['document_id'] = contract['contract_id']

    elif wizard_id == 'multilisting':
        for key in ('title', 'description', 'rooms', 'area'):
            if key in property_context:
                values[key] = property_context[key]

    return values
