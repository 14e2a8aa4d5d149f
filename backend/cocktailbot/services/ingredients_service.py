# cocktailbot/services/ingredients_service.py

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from cocktailbot.db.models.ingredient import Ingredient
from cocktailbot.schemas.ingredient import IngredientCreate


def create_ingredient(db: Session, data: IngredientCreate) -> Ingredient:
    ingredient = Ingredient(
        id=data.id,
        name=data.name,
        alcoholic=data.alcoholic,
        category=data.category,
    )
    db.add(ingredient)
    db.commit()
    db.refresh(ingredient)
    return ingredient


def get_ingredient_by_id(db: Session, ingredient_id: str) -> Optional[Ingredient]:
    return db.get(Ingredient, ingredient_id)


def list_ingredients(db: Session, category: Optional[str] = None) -> List[Ingredient]:
    stmt = select(Ingredient).order_by(Ingredient.name)
    if category:
        stmt = stmt.where(Ingredient.category == category)
    return list(db.scalars(stmt))


def delete_ingredient(db: Session, ingredient: Ingredient) -> None:
    db.delete(ingredient)
    db.commit()
