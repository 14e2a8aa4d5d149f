# cocktailbot/db/models/ingredient.py

from sqlalchemy import Column, String, Boolean
from cocktailbot.db.session import Base


class Ingredient(Base):
    """
    Catalog entry. The id is a slug ("white-rum") used by recipes and pumps.
    """
    __tablename__ = "ingredients"

    id = Column(String(64), primary_key=True, index=True)
    name = Column(String(64), nullable=False)
    alcoholic = Column(Boolean, nullable=False, default=False)
    category = Column(String(32), nullable=True)   # spirit / liqueur / juice / syrup / mixer / garnish
