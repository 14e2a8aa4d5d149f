# cocktailbot/dispense/resolver.py

from typing import Iterable, Optional

from cocktailbot.dispense.types import PumpMapping


def resolve(ingredient_id: str, mappings: Iterable[PumpMapping]) -> Optional[PumpMapping]:
    """First enabled pump bound to ingredient_id, or None.

    Disabled pumps are treated as absent. When two enabled pumps carry the same
    ingredient the first one in the supplied order always wins.
    """
    for mapping in mappings:
        if not mapping.enabled:
            continue
        if mapping.ingredient_id == ingredient_id:
            return mapping
    return None
