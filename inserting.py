import json
import logging

from database import CATALOG_KEY
from models import Product, ProductGroup

logger = logging.getLogger(__name__)

# Palette offered when creating or editing a group. Value "" means no colour.
COLOR_OPTIONS = [
    ("None", ""),
    ("Pink", "#ff6b81"),
    ("Rose", "#f06292"),
    ("Purple", "#d881ed"),
    ("Lavender", "#b388ff"),
    ("Indigo", "#8c9eff"),
    ("Blue", "#64b5f6"),
    ("Sky", "#4fc3f7"),
    ("Cyan", "#4dd0e1"),
    ("Teal", "#4db6ac"),
    ("Green", "#66bb6a"),
    ("Lime", "#9ccc65"),
    ("Yellow", "#ffeb3b"),
    ("Amber", "#ffc107"),
    ("Orange", "#ff9800"),
    ("Red", "#ff5252"),
]


def default_groups():
    """Built-in catalog used when nothing usable is stored."""
    # (id, name, is_open, [(product id, name, price)])
    groups = [
        ("1", "Keychains", True, [
            ("1-1", "1 key chain", 4.0),
            ("1-2", "3 key chains", 10.0),
            ("1-3", "5 key chains", 15.0),
        ]),
        ("2", "Stickers", True, [
            ("2-1", "1 sticker", 4.0),
            ("2-2", "3 stickers", 10.0),
        ]),
        ("3", "Magnets", False, [
            ("3-1", "1 magnet", 5.0),
        ]),
    ]
    return [
        ProductGroup(
            id=gid,
            name=name,
            order=order,
            is_open=is_open,
            products=[Product(pid, pname, price, 0) for pid, pname, price in products],
        )
        for order, (gid, name, is_open, products) in enumerate(groups)
    ]


def seed(db):
    """Write the default catalog into the store and return it."""
    groups = default_groups()
    db.set(CATALOG_KEY, json.dumps([g.to_dict() for g in groups]))
    logger.info("Seeded default catalog with %d groups", len(groups))
    return groups
