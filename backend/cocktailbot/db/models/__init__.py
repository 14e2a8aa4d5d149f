# cocktailbot/db/models/__init__.py

from cocktailbot.db.session import Base  # noqa: F401

from cocktailbot.db.models.ingredient import Ingredient  # noqa: F401
from cocktailbot.db.models.cocktail import Cocktail, RecipeLine  # noqa: F401
from cocktailbot.db.models.pump import Pump  # noqa: F401
from cocktailbot.db.models.tank_level import TankLevel  # noqa: F401
from cocktailbot.db.models.dispense_run import DispenseRun  # noqa: F401
