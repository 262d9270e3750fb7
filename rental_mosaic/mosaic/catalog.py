"""
Default Mosaic Module Catalog

Modules offered by the mosaic builder, in display order. Prices are in
roubles. Locked modules are premium services without a wizard yet.
"""

DEFAULT_MODULES = [
    {
        'id': 'contract',
        'title': 'Rental contract',
        'description': 'Contract from a template with automatic field filling',
        'price': 0,
        'required': True,
        'wizard': 'contract',
    },
    {
        'id': 'scoring',
        'title': 'Tenant scoring',
        'description': 'Solvency check through credit bureaus',
        'price': 0,
        'required': True,
        'wizard': 'scoring',
    },
    {
        'id': 'inventory',
        'title': 'Property inventory',
        'description': 'Photo inventory with an automatic hand-over act',
        'price': 0,
        'wizard': 'inventory',
    },
    {
        'id': 'signature',
        'title': 'Digital signature',
        'description': 'Remote contract signing with a one-time code',
        'price': 50,
        'dependencies': ['contract'],
        'wizard': 'signature',
    },
    {
        'id': 'multilisting',
        'title': 'Multi-listing',
        'description': 'Publishing to Avito, CIAN, DomClick and other platforms',
        'price': 300,
        'dependencies': ['inventory'],
        'wizard': 'multilisting',
    },
    {
        'id': 'insurance',
        'title': 'Rental insurance',
        'description': 'Property and liability cover for the lease',
        'price': 500,
        'dependencies': ['scoring'],
        'locked': True,
    },
    {
        'id': 'escrow',
        'title': 'Safe deal',
        'description': 'Escrow account for the deposit',
        'price': 650,
        'dependencies': ['scoring'],
        'locked': True,
    },
    {
        'id': 'salary',
        'title': 'Salary project',
        'description': 'Rent paid directly from the employer payroll',
        'price': 4500,
        'dependencies': ['multilisting'],
        'locked': True,
    },
    {
        'id': 'yandex',
        'title': 'Yandex Rent',
        'description': 'Managed listing on Yandex Rent',
        'price': 18000,
        'dependencies': ['multilisting'],
        'locked': True,
    },
]
