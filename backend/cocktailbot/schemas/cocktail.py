# cocktailbot/schemas/cocktail.py

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class RecipeLineIn(BaseModel):
    ingredient_id: str = Field(..., examples=["white-rum"])
    volume_ml: float = Field(..., gt=0, examples=[40.0])
    dispense_class: Literal["automatic", "manual"] = "automatic"
    pour_style: Literal["immediate", "float"] = "immediate"
    instructions: Optional[str] = Field(None, examples=["Garnish with a lime wedge"])


class RecipeLineOut(RecipeLineIn):
    position: int

    class Config:
        from_attributes = True


class CocktailBase(BaseModel):
    name: str = Field(..., examples=["Mai Tai"])
    description: Optional[str] = None
    alcoholic: bool = True
    image: Optional[str] = Field(None, examples=["/images/cocktails/mai_tai.jpg"])


class CocktailCreate(CocktailBase):
    id: str = Field(..., min_length=1, max_length=64, examples=["mai-tai"])
    recipe: List[RecipeLineIn] = Field(..., min_length=1)


class CocktailUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    alcoholic: Optional[bool] = None
    image: Optional[str] = None
    recipe: Optional[List[RecipeLineIn]] = Field(None, min_length=1)


class CocktailOut(CocktailBase):
    id: str
    recipe: List[RecipeLineOut] = Field(..., validation_alias="lines")
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
        populate_by_name = True


class AvailabilityOut(BaseModel):
    cocktail_id: str
    size_ml: float
    can_make: bool
    low_ingredients: List[str] = []
    missing_ingredients: List[str] = []
