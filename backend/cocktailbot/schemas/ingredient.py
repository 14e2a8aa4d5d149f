# cocktailbot/schemas/ingredient.py

from typing import Optional

from pydantic import BaseModel, Field


class IngredientBase(BaseModel):
    name: str = Field(..., examples=["White Rum"])
    alcoholic: bool = False
    category: Optional[str] = Field(None, examples=["spirit"])


class IngredientCreate(IngredientBase):
    id: str = Field(..., min_length=1, max_length=64, examples=["white-rum"])


class IngredientOut(IngredientBase):
    id: str

    class Config:
        from_attributes = True
