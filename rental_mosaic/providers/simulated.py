"""
Simulated Providers

Stand-ins for the external services, used by the demo application. They
answer after ``delay`` seconds with plausible random data; a ``seed`` makes
the answers reproducible.
"""

import asyncio
import random
import uuid
import logging
from datetime import datetime
from typing import Dict, List, Any, Optional

from .base import (
    ScoringProvider, SignatureProvider, ContentOptimizationProvider,
    ListingPublishProvider, ContractProvider, InventoryProvider, ProviderRegistry,
)

log = logging.getLogger(__name__)

INVENTORY_CATALOG = [
    ('Sofa', 'furniture', 45000),
    ('Double bed', 'furniture', 38000),
    ('Wardrobe', 'furniture', 25000),
    ('Dining table', 'furniture', 15000),
    ('Refrigerator', 'appliance', 52000),
    ('Washing machine', 'appliance', 34000),
    ('Television', 'electronics', 41000),
    ('Microwave', 'appliance', 8000),
    ('Air conditioner', 'appliance', 36000),
]

PLATFORM_URLS = {
    'avito': 'https://www.avito.ru/items/{id}',
    'cian': 'https://www.cian.ru/rent/flat/{id}/',
    'domclick': 'https://domclick.ru/card/rent__flat__{id}',
    'yandex': 'https://realty.yandex.ru/offer/{id}/',
    'realty': 'https://realty.example.ru/listing/{id}',
}


class SimulatedProvider:
    """Shared latency and randomness for the simulated providers."""

    def __init__(self, delay: float = 0.0, rng: Optional[random.Random] = None):
        self.delay = delay
        self.rng = rng or random.Random()

    async def _pause(self):
        await asyncio.sleep(self.delay)


class SimulatedScoringProvider(SimulatedProvider, ScoringProvider):

    async def score_person(self, full_name, passport, birth_date):
        await self._pause()
        rng = self.rng
        score = rng.randint(600, 1000)
        risk_level = 'low' if rng.random() > 0.3 else ('medium' if rng.random() > 0.6 else 'high')
        log.debug(f"Simulated score {score} ({risk_level}) for {full_name}")
        return {
            'score': score,
            'risk_level': risk_level,
            'factors': {
                'credit_history': 'excellent' if rng.random() > 0.2 else 'good',
                'debt_load': 'low' if rng.random() > 0.3 else 'medium',
                'employment': 'stable' if rng.random() > 0.4 else 'temporary',
                'income': 'sufficient' if rng.random() > 0.5 else 'insufficient',
            },
            'bureau_data': {
                bureau: {
                    'credit_score': rng.randint(700, 999),
                    'active_loans': rng.randint(0, 2),
                    'overdue_payments': rng.randint(0, 1),
                }
                for bureau in ('nbki', 'okb')
            },
            'recommendations': [
                'Standard deposit recommended' if rng.random() > 0.3
                else 'Increased deposit or guarantor recommended'
            ],
        }


class SimulatedSignatureProvider(SimulatedProvider, SignatureProvider):
    """Accepts any six-digit code once a code was sent for the signer."""

    def __init__(self, delay: float = 0.0, rng: Optional[random.Random] = None):
        super().__init__(delay, rng)
        self.sent_codes: List[Dict[str, str]] = []

    async def send_verification_code(self, signer_id, channel):
        await self._pause()
        self.sent_codes.append({'signer_id': signer_id, 'channel': channel})
        log.debug(f"Simulated verification code sent to {signer_id} via {channel}")

    async def confirm_signature(self, document_id, code):
        await self._pause()
        signed = len(code) == 6 and code.isdigit()
        return {
            'signed': signed,
            'signed_at': datetime.utcnow().isoformat() if signed else None,
            'certificate_id': f"cert_{uuid.UUID(int=self.rng.getrandbits(128)).hex[:12]}" if signed else None,
        }


class SimulatedContentProvider(SimulatedProvider, ContentOptimizationProvider):

    async def optimize(self, draft):
        await self._pause()
        title = (draft.get('title') or '').strip()
        description = (draft.get('description') or '').strip()
        rooms = draft.get('rooms')

        tags = ['rent', 'long-term']
        if rooms:
            tags.append(f'{rooms}-room')
        return {
            'title': title[:1].upper() + title[1:] if title else title,
            'description': f"{description}\n\nAvailable for long-term rent. Viewing at a convenient time.",
            'tags': tags,
            'highlights': ['Verified owner', 'Digital contract'],
        }


class SimulatedListingProvider(SimulatedProvider, ListingPublishProvider):

    async def publish(self, content, platform_ids):
        await self._pause()
        results = []
        for platform_id in platform_ids:
            listing_id = self.rng.randint(10 ** 8, 10 ** 9 - 1)
            results.append({
                'platform_id': platform_id,
                'published': True,
                'listing_url': PLATFORM_URLS.get(platform_id, '').format(id=listing_id) or None,
                'views': self.rng.randint(0, 500),
                'contacts': self.rng.randint(0, 25),
            })
        return results


class SimulatedContractProvider(SimulatedProvider, ContractProvider):

    async def generate_contract(self, template_id, values):
        await self._pause()
        contract_id = f"contract_{uuid.UUID(int=self.rng.getrandbits(128)).hex[:12]}"
        lines = [
            f"RESIDENTIAL LEASE AGREEMENT ({template_id})",
            f"Landlord: {values.get('landlord_name', '')}",
            f"Tenant: {values.get('tenant_name', '')}",
            f"Property: {values.get('property_title', '')}, {values.get('property_address', '')}",
            f"Monthly rent: {values.get('monthly_rent', '')}",
            f"Deposit: {values.get('deposit', 0)}",
            f"Term: {values.get('start_date', '')} - {values.get('end_date', '')}",
        ]
        if values.get('additional_terms'):
            lines.append(f"Additional terms: {values['additional_terms']}")
        return {
            'contract_id': contract_id,
            'file_name': f"{contract_id}.txt",
            'content': "\n".join(lines),
        }


class SimulatedInventoryProvider(SimulatedProvider, InventoryProvider):

    async def analyze_photos(self, photos):
        await self._pause()
        rng = self.rng
        picked = rng.sample(INVENTORY_CATALOG, k=min(len(INVENTORY_CATALOG), max(1, len(photos))))
        return {
            'items': [
                {
                    'name': name,
                    'category': category,
                    'condition': rng.choice(('excellent', 'good', 'fair')),
                    'estimated_value': float(value),
                    'confidence': round(rng.uniform(0.75, 0.99), 2),
                }
                for name, category, value in picked
            ]
        }

    async def generate_act(self, items, values):
        await self._pause()
        act_id = f"act_{uuid.UUID(int=self.rng.getrandbits(128)).hex[:12]}"
        return {'act_id': act_id, 'file_name': f"{act_id}.txt"}


def simulated_providers(delay: float = 0.0, seed: Optional[int] = None) -> ProviderRegistry:
    """
    Build a registry of simulated providers sharing one random generator

    Args:
        delay: Artificial latency of every call, in seconds
        seed: Seed for reproducible answers
    """
    rng = random.Random(seed)
    return ProviderRegistry(
        scoring=SimulatedScoringProvider(delay, rng),
        signature=SimulatedSignatureProvider(delay, rng),
        content=SimulatedContentProvider(delay, rng),
        listing=SimulatedListingProvider(delay, rng),
        contract=SimulatedContractProvider(delay, rng),
        inventory=SimulatedInventoryProvider(delay, rng),
    )
