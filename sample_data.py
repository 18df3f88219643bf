"""
Menu served when the store has no products or categories yet.
"""

import copy

_IMAGE = "https://via.placeholder.com/400x300/8B4513/FFFFFF?text="

_PRODUCTS_NO_TABLE = [
    {
        "id": 1,
        "title": "Heineken Beer",
        "category": "beer",
        "price": 12.00,
        "description": "Imported premium beer",
        "flavors": [
            {"name": "Long Neck", "image": _IMAGE + "Beer", "quantity": 50, "description": "330ml bottle"},
        ],
        "status": "active",
        "displayOrder": 1,
    },
    {
        "id": 2,
        "title": "French Fries Portion",
        "category": "snack",
        "price": 25.00,
        "description": "Crispy french fries",
        "flavors": [
            {"name": "Medium", "image": _IMAGE + "Fries", "quantity": 20, "description": "Serves 2"},
        ],
        "status": "active",
        "displayOrder": 2,
    },
]

_PRODUCTS_EMPTY = [
    {
        "id": 1,
        "title": "Test Beer",
        "category": "beer",
        "price": 10.00,
        "description": "Sample beer for testing",
        "flavors": [
            {"name": "Long Neck", "image": _IMAGE + "Beer", "quantity": 10, "description": "Test bottle"},
        ],
        "status": "active",
        "displayOrder": 1,
    },
]

_CATEGORIES_NO_TABLE = [
    {"id": "beer", "name": "Beers", "description": "Beers of every style and brand"},
    {"id": "soda", "name": "Sodas", "description": "Sodas and non-alcoholic drinks"},
    {"id": "snack", "name": "Snacks", "description": "Snacks and side dishes"},
]

_CATEGORIES_EMPTY = [
    {"id": "beer", "name": "Beers", "description": "Assorted beers"},
]


def sample_products(table_missing: bool = True) -> list:
    return copy.deepcopy(_PRODUCTS_NO_TABLE if table_missing else _PRODUCTS_EMPTY)


def sample_categories(table_missing: bool = True) -> list:
    return copy.deepcopy(_CATEGORIES_NO_TABLE if table_missing else _CATEGORIES_EMPTY)
