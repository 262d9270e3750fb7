"""
Deterministic fake providers and valid wizard data shared by the tests.
"""

import asyncio

from rental_mosaic.providers.base import (
    ScoringProvider, SignatureProvider, ContentOptimizationProvider,
    ListingPublishProvider, ContractProvider, InventoryProvider, ProviderRegistry,
)


CONTRACT_VALUES = {
    'template_id': 'standard',
    'property_title': 'Two-room apartment',
    'property_address': 'Moscow, Tverskaya 1, apt. 12',
    'property_type': 'APARTMENT',
    'monthly_rent': 50000,
    'deposit': 50000,
    'utilities': True,
    'landlord_name': 'Petrov Petr',
    'landlord_passport': '4510 123456',
    'landlord_address': 'Moscow, Arbat 5',
    'tenant_name': 'Ivanov Ivan',
    'tenant_passport': '4511654321',
    'tenant_phone': '+7 900 123-45-67',
    'tenant_email': 'ivan.ivanov@mail.ru',
    'start_date': '2025-01-01',
    'end_date': '2025-12-31',
    'additional_terms': 'No pets',
}

SCORING_VALUES = {
    'full_name': 'Иванов Иван',
    'passport': '1234 567890',
    'birth_date': '1990-01-01',
}

INVENTORY_ITEMS = [
    {'name': 'Sofa', 'category': 'furniture', 'condition': 'good', 'estimated_value': 45000.0, 'confidence': 0.9},
    {'name': 'Refrigerator', 'category': 'appliance', 'condition': 'excellent',
     'estimated_value': 52000.0, 'confidence': 0.95},
]

SIGNATURE_CODE = '123456'


class GatedProvider:
    """
    Base for fakes whose answers can be held back.

    Set ``gate`` to an ``asyncio.Event`` from inside the running loop; calls
    block until it is set.
    """

    def __init__(self):
        self.gate = None
        self.calls = []

    async def _answer(self, name, *args):
        self.calls.append((name,) + args)
        if self.gate is not None:
            await self.gate.wait()


class FakeScoringProvider(GatedProvider, ScoringProvider):

    def __init__(self, score=720, risk_level='low', response=None):
        super().__init__()
        self.score = score
        self.risk_level = risk_level
        self.response = response

    async def score_person(self, full_name, passport, birth_date):
        await self._answer('score_person', full_name, passport, birth_date)
        if self.response is not None:
            return self.response
        return {
            'score': self.score,
            'risk_level': self.risk_level,
            'factors': {'credit_history': 'excellent'},
            'bureau_data': {'nbki': {'credit_score': 810}},
            'recommendations': ['Standard deposit recommended'],
        }


class FakeSignatureProvider(GatedProvider, SignatureProvider):

    def __init__(self, expected_code=SIGNATURE_CODE):
        super().__init__()
        self.expected_code = expected_code

    async def send_verification_code(self, signer_id, channel):
        await self._answer('send_verification_code', signer_id, channel)

    async def confirm_signature(self, document_id, code):
        await self._answer('confirm_signature', document_id, code)
        signed = code == self.expected_code
        return {
            'signed': signed,
            'signed_at': '2025-01-01T12:00:00' if signed else None,
            'certificate_id': 'cert_test' if signed else None,
        }


class FakeContentProvider(GatedProvider, ContentOptimizationProvider):

    async def optimize(self, draft):
        await self._answer('optimize', draft)
        return {
            'title': f"{draft['title']} (optimized)",
            'description': f"{draft['description']} Close to the metro.",
            'tags': ['rent', 'metro'],
            'highlights': ['Verified owner'],
        }


class FakeListingProvider(GatedProvider, ListingPublishProvider):

    def __init__(self, published=True):
        super().__init__()
        self.published = published

    async def publish(self, content, platform_ids):
        await self._answer('publish', content, list(platform_ids))
        return [
            {
                'platform_id': platform_id,
                'published': self.published,
                'listing_url': f'https://{platform_id}.example/1' if self.published else None,
                'views': 10,
                'contacts': 2,
            }
            for platform_id in platform_ids
        ]


class FakeContractProvider(GatedProvider, ContractProvider):

    async def generate_contract(self, template_id, values):
        await self._answer('generate_contract', template_id)
        return {
            'contract_id': 'contract_test_1',
            'file_name': 'contract_test_1.txt',
            'content': f"Lease between {values.get('landlord_name')} and {values.get('tenant_name')}",
        }


class FakeInventoryProvider(GatedProvider, InventoryProvider):

    def __init__(self, items=None):
        super().__init__()
        self.items = INVENTORY_ITEMS if items is None else items

    async def analyze_photos(self, photos):
        await self._answer('analyze_photos', list(photos))
        return {'items': [dict(item) for item in self.items]}

    async def generate_act(self, items, values):
        await self._answer('generate_act', len(items))
        return {'act_id': 'act_test_1', 'file_name': 'act_test_1.txt'}


class SlowScoringProvider(ScoringProvider):
    """Answers long after any reasonable test timeout."""

    def __init__(self, delay=5.0):
        self.delay = delay

    async def score_person(self, full_name, passport, birth_date):
        await asyncio.sleep(self.delay)
        return {'score': 700, 'risk_level': 'low'}


def fake_providers(**overrides) -> ProviderRegistry:
    """Registry of fresh fakes; keyword arguments replace single providers."""
    providers = dict(
        scoring=FakeScoringProvider(),
        signature=FakeSignatureProvider(),
        content=FakeContentProvider(),
        listing=FakeListingProvider(),
        contract=FakeContractProvider(),
        inventory=FakeInventoryProvider(),
    )
    providers.update(overrides)
    return ProviderRegistry(**providers)
