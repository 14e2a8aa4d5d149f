# cocktailbot/api/v1/cocktails.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from cocktailbot.api.deps import dispense_http_error, get_db
from cocktailbot.core.errors import DispenseError
from cocktailbot.schemas.cocktail import AvailabilityOut, CocktailCreate, CocktailOut, CocktailUpdate
from cocktailbot.services import cocktails_service, dispense_service, seed_service

router = APIRouter(prefix="/cocktails", tags=["cocktails"])


@router.post("/", response_model=CocktailOut, status_code=status.HTTP_201_CREATED)
def create_cocktail_endpoint(
    data: CocktailCreate,
    db: Session = Depends(get_db),
):
    if cocktails_service.get_cocktail_by_id(db, data.id):
        raise HTTPException(status_code=409, detail="Cocktail already exists")
    return cocktails_service.create_cocktail(db, data)


@router.get("/", response_model=List[CocktailOut])
def list_cocktails_endpoint(
    alcoholic: Optional[bool] = None,
    db: Session = Depends(get_db),
):
    return cocktails_service.list_cocktails(db, alcoholic=alcoholic)


@router.post("/reset", response_model=List[CocktailOut])
def reset_cocktails_endpoint(
    db: Session = Depends(get_db),
):
    """Discard every saved cocktail and restore the default menu."""
    seed_service.reset_cocktails(db)
    db.expire_all()
    return cocktails_service.list_cocktails(db)


@router.get("/{cocktail_id}", response_model=CocktailOut)
def get_cocktail_endpoint(
    cocktail_id: str,
    db: Session = Depends(get_db),
):
    cocktail = cocktails_service.get_cocktail_by_id(db, cocktail_id)
    if not cocktail:
        raise HTTPException(status_code=404, detail="Cocktail not found")
    return cocktail


@router.put("/{cocktail_id}", response_model=CocktailOut)
def update_cocktail_endpoint(
    cocktail_id: str,
    data: CocktailUpdate,
    db: Session = Depends(get_db),
):
    cocktail = cocktails_service.get_cocktail_by_id(db, cocktail_id)
    if not cocktail:
        raise HTTPException(status_code=404, detail="Cocktail not found")
    return cocktails_service.update_cocktail(db, cocktail, data)


@router.delete("/{cocktail_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_cocktail_endpoint(
    cocktail_id: str,
    db: Session = Depends(get_db),
):
    cocktail = cocktails_service.get_cocktail_by_id(db, cocktail_id)
    if not cocktail:
        raise HTTPException(status_code=404, detail="Cocktail not found")
    cocktails_service.delete_cocktail(db, cocktail)
    return


@router.get("/{cocktail_id}/availability", response_model=AvailabilityOut)
def get_availability_endpoint(
    cocktail_id: str,
    size: float = Query(..., gt=0),
    db: Session = Depends(get_db),
):
    """
    Can this cocktail be poured at this size with what is in the tanks?

    The touchscreen calls this before enabling the "prepare" button.
    """
    cocktail = cocktails_service.get_cocktail_by_id(db, cocktail_id)
    if not cocktail:
        raise HTTPException(status_code=404, detail="Cocktail not found")
    try:
        result = dispense_service.availability_for(db, cocktails_service.to_domain(cocktail), size)
    except DispenseError as e:
        raise dispense_http_error(e)
    return AvailabilityOut(
        cocktail_id=cocktail_id,
        size_ml=size,
        can_make=result.can_make,
        low_ingredients=result.low_ingredients,
        missing_ingredients=result.missing_ingredients,
    )
