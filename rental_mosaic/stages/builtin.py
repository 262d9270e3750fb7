"""
Built-in Provider Stages

One stage per provider call made by the mosaic wizards.
"""

import logging
from datetime import date
from typing import Dict, List, Any

from ..providers.base import ProviderRejectedError
from .base import Stage
from .schemas import (
    ScoringResponseSchema, ContractResponseSchema, PhotoAnalysisSchema,
    InventoryActSchema, SignatureConfirmationSchema, OptimizedContentSchema,
    PublicationSchema,
)

log = logging.getLogger(__name__)


def score_label(score: int) -> str:
    if score >= 800:
        return 'excellent'
    if score >= 650:
        return 'good'
    return 'risky'


def overall_assessment(score: int, risk_level: str) -> Dict[str, Any]:
    """Rental recommendation for a bureau score and risk level"""
    if score >= 800 and risk_level == 'low':
        return {'rating': 'excellent', 'deposit_months': 1, 'guarantor_required': False,
                'summary': 'Excellent: standard deposit recommended'}
    if score >= 650 and risk_level == 'low':
        return {'rating': 'good', 'deposit_months': 1, 'guarantor_required': False,
                'summary': 'Good: standard deposit recommended'}
    if score >= 500 and risk_level == 'medium':
        return {'rating': 'satisfactory', 'deposit_months': 2, 'guarantor_required': False,
                'summary': 'Satisfactory: increased deposit recommended'}
    return {'rating': 'risky', 'deposit_months': 3, 'guarantor_required': True,
            'summary': 'Risky: guarantor required or decline'}


def _iso(value: Any) -> str:
    return value.isoformat() if isinstance(value, date) else str(value)


class ContractGenerationStage(Stage):
    name = 'generate_contract'
    schema = ContractResponseSchema()

    async def invoke(self, providers, values):
        contract = providers.require('contract')
        return await contract.generate_contract(values.get('template_id') or 'standard', dict(values))

    def build_result(self, data, values):
        data['template_id'] = values.get('template_id') or 'standard'
        return data


class ScoringStage(Stage):
    name = 'score_tenant'
    schema = ScoringResponseSchema()

    async def invoke(self, providers, values):
        scoring = providers.require('scoring')
        return await scoring.score_person(
            values['full_name'].strip(), values['passport'].strip(), _iso(values['birth_date']))

    def build_result(self, data, values):
        data['full_name'] = values['full_name'].strip()
        data['score_label'] = score_label(data['score'])
        data['assessment'] = overall_assessment(data['score'], data['risk_level'])
        return data


class PhotoAnalysisStage(Stage):
    """Recognises furniture and appliances on the uploaded photos."""

    name = 'analyze_photos'
    schema = PhotoAnalysisSchema()

    async def invoke(self, providers, values):
        inventory = providers.require('inventory')
        return await inventory.analyze_photos(list(values['photos']))

    def build_result(self, data, values):
        if not data['items']:
            raise ProviderRejectedError("No items were recognised on the photos")
        return {'items': data['items']}


class InventoryActStage(Stage):
    name = 'generate_act'
    schema = InventoryActSchema()

    async def invoke(self, providers, values):
        inventory = providers.require('inventory')
        return await inventory.generate_act(list(values['items']), dict(values))

    def build_result(self, data, values):
        items = list(values['items'])
        data['items'] = items
        data['item_count'] = len(items)
        data['total_value'] = sum(float(item['estimated_value']) for item in items)
        return data


class SendVerificationCodeStage(Stage):
    name = 'send_verification_code'

    async def invoke(self, providers, values):
        signature = providers.require('signature')
        return await signature.send_verification_code(values['signer_id'], values.get('channel') or 'sms')

    def build_result(self, data, values):
        return {'code_sent': True, 'code_channel': values.get('channel') or 'sms'}


class ConfirmSignatureStage(Stage):
    name = 'confirm_signature'
    schema = SignatureConfirmationSchema()

    async def invoke(self, providers, values):
        signature = providers.require('signature')
        return await signature.confirm_signature(values['document_id'], str(values['verification_code']).strip())

    def build_result(self, data, values):
        if not data['signed']:
            raise ProviderRejectedError("The verification code was not accepted")
        data['document_id'] = values['document_id']
        data['signer_id'] = values['signer_id']
        return data


class ContentOptimizationStage(Stage):
    name = 'optimize_content'
    schema = OptimizedContentSchema()

    async def invoke(self, providers, values):
        content = providers.require('content')
        draft = {key: values.get(key) for key in ('title', 'description', 'rooms', 'area')}
        return await content.optimize(draft)


class PublishListingStage(Stage):
    name = 'publish_listing'
    schema = PublicationSchema()
    many = True

    async def invoke(self, providers, values):
        listing = providers.require('listing')
        content = {key: values.get(key) for key in ('title', 'description', 'tags', 'highlights', 'rooms', 'area')}
        return await listing.publish(content, list(values['platform_ids']))

    def build_result(self, data: List[Dict[str, Any]], values):
        published = [entry for entry in data if entry['published']]
        if not published:
            raise ProviderRejectedError("No platform accepted the listing")
        return {
            'listings': data,
            'published_count': len(published),
            'total_views': sum(entry['views'] for entry in data),
            'total_contacts': sum(entry['contacts'] for entry in data),
        }
