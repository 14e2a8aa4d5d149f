# cocktailbot/services/seed_service.py

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from cocktailbot.core.config import settings
from cocktailbot.db.models.cocktail import Cocktail, RecipeLine
from cocktailbot.db.models.ingredient import Ingredient
from cocktailbot.db.models.pump import Pump
from cocktailbot.db.models.tank_level import TankLevel

logger = logging.getLogger(__name__)

# (id, name, alcoholic, category)
DEFAULT_INGREDIENTS = [
    ("vodka", "Vodka", True, "spirit"),
    ("white-rum", "White Rum", True, "spirit"),
    ("dark-rum", "Dark Rum", True, "spirit"),
    ("gin", "Gin", True, "spirit"),
    ("tequila", "Tequila", True, "spirit"),
    ("whiskey", "Whiskey", True, "spirit"),
    ("triple-sec", "Triple Sec", True, "liqueur"),
    ("blue-curacao", "Blue Curacao", True, "liqueur"),
    ("malibu", "Malibu", True, "liqueur"),
    ("orange-juice", "Orange Juice", False, "juice"),
    ("pineapple-juice", "Pineapple Juice", False, "juice"),
    ("cranberry-juice", "Cranberry Juice", False, "juice"),
    ("lime-juice", "Lime Juice", False, "juice"),
    ("lemon-juice", "Lemon Juice", False, "juice"),
    ("passion-fruit-juice", "Passion Fruit Juice", False, "juice"),
    ("grenadine", "Grenadine", False, "syrup"),
    ("sugar-syrup", "Sugar Syrup", False, "syrup"),
    ("almond-syrup", "Almond Syrup", False, "syrup"),
    ("coconut-syrup", "Coconut Syrup", False, "syrup"),
    ("soda-water", "Soda Water", False, "mixer"),
    ("tonic-water", "Tonic Water", False, "mixer"),
    ("ginger-beer", "Ginger Beer", False, "mixer"),
    ("cola", "Cola", False, "mixer"),
    ("mint", "Mint Leaves", False, "garnish"),
    ("ice", "Ice", False, "garnish"),
]

# BCM pins of the relay board, pump 1..n
DEFAULT_PINS = [17, 27, 22, 23, 24, 25, 5, 6, 13, 19, 26, 16, 20, 21]

DEFAULT_PUMP_INGREDIENTS = [
    "white-rum", "dark-rum", "vodka", "orange-juice", "pineapple-juice",
    "lime-juice", "passion-fruit-juice", "grenadine", "blue-curacao", "sugar-syrup",
]

# (id, name, description, alcoholic, [(ingredient, ml, class, pour_style, instructions)])
DEFAULT_COCKTAILS = [
    (
        "mai-tai", "Mai Tai", "Rum, juice and a grenadine float", True,
        [
            ("white-rum", 40, "automatic", "immediate", None),
            ("orange-juice", 30, "automatic", "immediate", None),
            ("grenadine", 10, "automatic", "float", None),
        ],
    ),
    (
        "rum-sunrise", "Rum Sunrise", "Orange juice layered over grenadine, topped with soda", True,
        [
            ("white-rum", 50, "automatic", "immediate", None),
            ("orange-juice", 120, "automatic", "immediate", None),
            ("grenadine", 15, "automatic", "float", None),
            ("soda-water", 30, "manual", "immediate", "Top up with soda water and serve over ice"),
        ],
    ),
    (
        "planters-punch", "Planter's Punch", "Dark rum with tropical juices", True,
        [
            ("dark-rum", 60, "automatic", "immediate", None),
            ("pineapple-juice", 60, "automatic", "immediate", None),
            ("orange-juice", 60, "automatic", "immediate", None),
            ("lime-juice", 15, "automatic", "immediate", None),
            ("sugar-syrup", 10, "automatic", "immediate", None),
            ("grenadine", 5, "automatic", "float", None),
        ],
    ),
    (
        "virgin-sunrise", "Virgin Sunrise", "Alcohol-free sunrise", False,
        [
            ("orange-juice", 150, "automatic", "immediate", None),
            ("pineapple-juice", 50, "automatic", "immediate", None),
            ("grenadine", 15, "automatic", "float", None),
        ],
    ),
]


def _is_empty(db: Session, model) -> bool:
    return db.scalar(select(func.count()).select_from(model)) == 0


def _add_default_cocktails(db: Session) -> None:
    for cocktail_id, name, description, alcoholic, recipe in DEFAULT_COCKTAILS:
        cocktail = Cocktail(id=cocktail_id, name=name, description=description, alcoholic=alcoholic)
        cocktail.lines = [
            RecipeLine(
                position=position,
                ingredient_id=ingredient_id,
                volume_ml=volume,
                dispense_class=dispense_class,
                pour_style=pour_style,
                instructions=instructions,
            )
            for position, (ingredient_id, volume, dispense_class, pour_style, instructions) in enumerate(recipe)
        ]
        db.add(cocktail)


def seed_defaults(db: Session) -> None:
    """Fill empty tables on first start; tables that already hold rows are left alone."""
    if _is_empty(db, Ingredient):
        for ingredient_id, name, alcoholic, category in DEFAULT_INGREDIENTS:
            db.add(Ingredient(id=ingredient_id, name=name, alcoholic=alcoholic, category=category))
        logger.info("seeded %d ingredients", len(DEFAULT_INGREDIENTS))

    if _is_empty(db, Pump):
        for index in range(settings.PUMP_COUNT):
            ingredient_id = DEFAULT_PUMP_INGREDIENTS[index] if index < len(DEFAULT_PUMP_INGREDIENTS) else None
            db.add(Pump(
                id=index + 1,
                ingredient_id=ingredient_id,
                pin=DEFAULT_PINS[index % len(DEFAULT_PINS)],
                flow_rate=1.0,
                enabled=ingredient_id is not None,
            ))
        logger.info("seeded %d pumps", settings.PUMP_COUNT)

    if _is_empty(db, TankLevel):
        for index in range(settings.PUMP_COUNT):
            db.add(TankLevel(
                pump_id=index + 1,
                current_ml=settings.DEFAULT_TANK_CAPACITY_ML,
                capacity_ml=settings.DEFAULT_TANK_CAPACITY_ML,
            ))

    if _is_empty(db, Cocktail):
        _add_default_cocktails(db)
        logger.info("seeded %d cocktails", len(DEFAULT_COCKTAILS))

    db.commit()


def reset_cocktails(db: Session) -> int:
    """Drop every cocktail, user-made ones included, and restore the defaults."""
    removed = 0
    for cocktail in db.scalars(select(Cocktail)).all():
        db.delete(cocktail)
        removed += 1
    db.flush()

    _add_default_cocktails(db)
    db.commit()
    logger.info("reset cocktails: removed %d, restored %d defaults", removed, len(DEFAULT_COCKTAILS))
    return len(DEFAULT_COCKTAILS)
