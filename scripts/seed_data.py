"""
Test data seeder — populates the database with sample data for development.

Usage:
    python scripts/seed_data.py

Creates:
  - 10 user profiles, one per US city
  - 3 items per user with random categories and swap preferences
  - 1 active algorithm policy carrying the default weights

Idempotent: users that already have a profile keep their items. Existing
swipes are cleared so discovery can be exercised from a clean slate.
"""

import asyncio
import random
import uuid

from sqlalchemy import delete, select

from swapengine.database import async_session
from swapengine.matching_engine.policy import DEFAULT_POLICY
from swapengine.models import (
    AlgorithmPolicy,
    Item,
    ItemCategory,
    ItemCondition,
    Profile,
    Swipe,
)

ITEMS_PER_USER = 3
SEED = 42

# ---------------------------------------------------------------------------
# Sample listings per category
# ---------------------------------------------------------------------------

SAMPLE_ITEMS: dict[ItemCategory, list[tuple[str, str]]] = {
    ItemCategory.GAMES: [
        ("PlayStation 5 Controller", "Barely used DualSense controller, white"),
        ("Nintendo Switch Lite", "Yellow edition, comes with case"),
        ("Mario Kart 8 Deluxe", "Physical copy, perfect condition"),
    ],
    ItemCategory.ELECTRONICS: [
        ("AirPods Pro 2", "With MagSafe case, 6 months old"),
        ("Mechanical Keyboard", "Brown switches, RGB"),
        ("Noise Cancelling Headphones", "Over-ear, black"),
    ],
    ItemCategory.CLOTHES: [
        ("Winter Jacket", "Size M, navy blue"),
        ("Classic Denim Jeans", "32x32, straight fit"),
        ("Fleece Pullover", "Size L, gray"),
    ],
    ItemCategory.BOOKS: [
        ("Atomic Habits", "Hardcover, unread"),
        ("The Pragmatic Programmer", "20th Anniversary Edition"),
        ("Dune Collection", "First 3 books, paperback"),
    ],
    ItemCategory.HOME_GARDEN: [
        ("Cordless Vacuum", "With all attachments"),
        ("Pressure Cooker", "6 quart, barely used"),
        ("Indoor Plant Set", "3 potted succulents"),
    ],
    ItemCategory.SPORTS: [
        ("Dumbbell Set", "10, 15 and 20 lbs"),
        ("Tennis Racket", "With case"),
        ("Camping Tent 4-Person", "Waterproof, easy setup"),
    ],
    ItemCategory.OTHER: [
        ("Vinyl Record Collection", "20 classic rock albums"),
        ("Board Game Bundle", "Three family strategy games"),
        ("Art Supplies Kit", "Watercolors, brushes, paper"),
    ],
}

SEED_CONDITIONS = [
    ItemCondition.NEW, ItemCondition.LIKE_NEW, ItemCondition.GOOD, ItemCondition.FAIR,
]

LOCATIONS = [
    ("New York", 40.7128, -74.0060),
    ("Los Angeles", 34.0522, -118.2437),
    ("Chicago", 41.8781, -87.6298),
    ("Houston", 29.7604, -95.3698),
    ("Phoenix", 33.4484, -112.0740),
    ("Philadelphia", 39.9526, -75.1652),
    ("San Antonio", 29.4241, -98.4936),
    ("San Diego", 32.7157, -117.1611),
    ("Dallas", 32.7767, -96.7970),
    ("San Jose", 37.3382, -121.8863),
]


def _make_item(rng: random.Random, user_id: uuid.UUID, lat: float, lon: float) -> Item:
    categories = list(ItemCategory)
    category = rng.choice(categories)
    title, description = rng.choice(SAMPLE_ITEMS[category])
    return Item(
        user_id=user_id,
        title=title,
        description=description,
        category=category,
        condition=rng.choice(SEED_CONDITIONS),
        swap_preferences=rng.sample(categories, rng.randint(2, 4)),
        value_min=rng.randint(10, 59),
        value_max=rng.randint(100, 299),
        latitude=lat + (rng.random() - 0.5) * 0.1,
        longitude=lon + (rng.random() - 0.5) * 0.1,
    )


# ---------------------------------------------------------------------------
# Main seed routine
# ---------------------------------------------------------------------------


async def seed() -> None:
    """Insert sample data into the database. Safe to run multiple times."""
    rng = random.Random(SEED)

    async with async_session() as session:
        existing = {
            p.display_name: p
            for p in (await session.execute(select(Profile))).scalars().all()
        }

        new_users = 0
        new_items = 0
        for i, (city, lat, lon) in enumerate(LOCATIONS, start=1):
            name = f"Test User {i}"
            if name in existing:
                continue

            profile = Profile(
                user_id=uuid.uuid4(), display_name=name, latitude=lat, longitude=lon,
            )
            session.add(profile)
            new_users += 1

            for _ in range(ITEMS_PER_USER):
                session.add(_make_item(rng, profile.user_id, lat, lon))
                new_items += 1
            print(f"  {name} ({city}): {ITEMS_PER_USER} items")

        has_policy = (
            await session.execute(select(AlgorithmPolicy.id).where(AlgorithmPolicy.active.is_(True)))
        ).first()
        if has_policy is None:
            session.add(AlgorithmPolicy(
                policy_version="seed-v1",
                weights=DEFAULT_POLICY.weights.model_dump(by_alias=True),
                exploration_policy=DEFAULT_POLICY.exploration.model_dump(),
                reciprocal_policy=DEFAULT_POLICY.reciprocal.model_dump(),
                description="Seeded default weights",
                active=True,
            ))
            print("  Policy: seed-v1 activated")

        await session.execute(delete(Swipe))
        await session.commit()

    print(f"\nSeeded {new_users} users and {new_items} items")


if __name__ == "__main__":
    asyncio.run(seed())
