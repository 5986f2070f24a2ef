"""
Deterministic demo data and id generation.

Everything here is seeded, so the same seed always yields the same ids and
the same ledger.
"""

from __future__ import annotations

import random
import string
from collections.abc import Callable
from datetime import date, time, timedelta

from brewmetrics.models.records import SaleRecord

# (name, category, price)
DEMO_MENU: list[tuple[str, str, float]] = [
    ("Americano (I/H)", "Coffee", 4000),
    ("Caffe Latte (I/H)", "Coffee", 4500),
    ("Hazelnut Americano (Iced)", "Coffee", 4500),
    ("Vanilla Bean Latte (Iced)", "Coffee", 5300),
    ("Dolce Latte (Iced)", "Coffee", 5500),
    ("Honey Americano (Iced)", "Coffee", 4500),
    ("Shakerato (Iced)", "Coffee", 4800),
    ("Earl Grey Tea", "Tea", 4000),
    ("Plain Scone", "Bakery", 3500),
    ("Chocolate Cookie", "Bakery", 2500),
]

_ID_ALPHABET = string.ascii_lowercase + string.digits


def make_id_factory(seed: int = 0, length: int = 9) -> Callable[[], str]:
    """Return a function producing reproducible random ids."""
    rng = random.Random(seed)

    def next_id() -> str:
        return "".join(rng.choice(_ID_ALPHABET) for _ in range(length))

    return next_id


def generate_demo_sales(
    seed: int = 0,
    end_date: date = date(2025, 11, 24),
    days: int = 30,
    open_hour: int = 8,
    close_hour: int = 22,
) -> list[SaleRecord]:
    """Build a seeded sales ledger of ``days`` days ending on ``end_date``.

    Weekends get five extra sales per day; roughly one sale in ten is a
    double order.
    """
    rng = random.Random(seed)
    next_id = make_id_factory(seed)
    sales: list[SaleRecord] = []

    current = end_date - timedelta(days=days - 1)
    while current <= end_date:
        count = rng.randint(10, 24)
        if current.weekday() >= 5:
            count += 5

        for _ in range(count):
            name, category, price = rng.choice(DEMO_MENU)
            sales.append(SaleRecord.create(
                id=next_id(),
                date=current,
                time=time(rng.randrange(open_hour, close_hour), rng.randrange(60)),
                item_name=name,
                category=category,
                quantity=2 if rng.random() > 0.9 else 1,
                unit_price=price,
            ))
        current += timedelta(days=1)

    return sales
