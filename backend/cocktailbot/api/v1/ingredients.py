# cocktailbot/api/v1/ingredients.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from cocktailbot.api.deps import get_db
from cocktailbot.schemas.ingredient import IngredientCreate, IngredientOut
from cocktailbot.services import ingredients_service

router = APIRouter(prefix="/ingredients", tags=["ingredients"])


@router.post("/", response_model=IngredientOut, status_code=status.HTTP_201_CREATED)
def create_ingredient_endpoint(
    data: IngredientCreate,
    db: Session = Depends(get_db),
):
    if ingredients_service.get_ingredient_by_id(db, data.id):
        raise HTTPException(status_code=409, detail="Ingredient already exists")
    return ingredients_service.create_ingredient(db, data)


@router.get("/", response_model=List[IngredientOut])
def list_ingredients_endpoint(
    category: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return ingredients_service.list_ingredients(db, category=category)


@router.get("/{ingredient_id}", response_model=IngredientOut)
def get_ingredient_endpoint(
    ingredient_id: str,
    db: Session = Depends(get_db),
):
    ingredient = ingredients_service.get_ingredient_by_id(db, ingredient_id)
    if not ingredient:
        raise HTTPException(status_code=404, detail="Ingredient not found")
    return ingredient


@router.delete("/{ingredient_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_ingredient_endpoint(
    ingredient_id: str,
    db: Session = Depends(get_db),
):
    ingredient = ingredients_service.get_ingredient_by_id(db, ingredient_id)
    if not ingredient:
        raise HTTPException(status_code=404, detail="Ingredient not found")
    ingredients_service.delete_ingredient(db, ingredient)
    return
