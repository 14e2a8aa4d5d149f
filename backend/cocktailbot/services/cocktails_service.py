# cocktailbot/services/cocktails_service.py

from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from cocktailbot.db.models.cocktail import Cocktail, RecipeLine
from cocktailbot.dispense import types
from cocktailbot.schemas.cocktail import CocktailCreate, CocktailUpdate, RecipeLineIn


def _build_lines(recipe: Sequence[RecipeLineIn]) -> List[RecipeLine]:
    return [
        RecipeLine(
            position=position,
            ingredient_id=line.ingredient_id,
            volume_ml=line.volume_ml,
            dispense_class=line.dispense_class,
            pour_style=line.pour_style,
            instructions=line.instructions,
        )
        for position, line in enumerate(recipe)
    ]


def create_cocktail(db: Session, data: CocktailCreate) -> Cocktail:
    cocktail = Cocktail(
        id=data.id,
        name=data.name,
        description=data.description,
        alcoholic=data.alcoholic,
        image=data.image,
    )
    cocktail.lines = _build_lines(data.recipe)
    db.add(cocktail)
    db.commit()
    db.refresh(cocktail)
    return cocktail


def get_cocktail_by_id(db: Session, cocktail_id: str) -> Optional[Cocktail]:
    return db.get(Cocktail, cocktail_id)


def list_cocktails(db: Session, alcoholic: Optional[bool] = None) -> List[Cocktail]:
    stmt = select(Cocktail).order_by(Cocktail.name)
    if alcoholic is not None:
        stmt = stmt.where(Cocktail.alcoholic == alcoholic)
    return list(db.scalars(stmt))


def update_cocktail(db: Session, cocktail: Cocktail, data: CocktailUpdate) -> Cocktail:
    fields = data.model_dump(exclude_unset=True)
    recipe = fields.pop("recipe", None)
    for field, value in fields.items():
        setattr(cocktail, field, value)
    if recipe is not None:
        # the whole recipe is replaced, never merged
        cocktail.lines = _build_lines(data.recipe)
    db.add(cocktail)
    db.commit()
    db.refresh(cocktail)
    return cocktail


def delete_cocktail(db: Session, cocktail: Cocktail) -> None:
    db.delete(cocktail)
    db.commit()


def to_domain(cocktail: Cocktail) -> types.Cocktail:
    return types.Cocktail(
        id=cocktail.id,
        name=cocktail.name,
        description=cocktail.description,
        alcoholic=bool(cocktail.alcoholic),
        image=cocktail.image,
        lines=tuple(
            types.RecipeLine(
                ingredient_id=line.ingredient_id,
                volume_ml=float(line.volume_ml),
                dispense_class=line.dispense_class,
                pour_style=line.pour_style,
                instructions=line.instructions,
            )
            for line in cocktail.lines
        ),
    )
