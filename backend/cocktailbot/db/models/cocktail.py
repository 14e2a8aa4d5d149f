# cocktailbot/db/models/cocktail.py

from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship

from cocktailbot.db.session import Base


class Cocktail(Base):
    __tablename__ = "cocktails"

    id = Column(String(64), primary_key=True, index=True)
    name = Column(String(64), nullable=False)
    description = Column(String(255), nullable=True)
    alcoholic = Column(Boolean, nullable=False, default=True)
    image = Column(String(255), nullable=True)

    lines = relationship(
        "RecipeLine",
        back_populates="cocktail",
        order_by="RecipeLine.position",
        cascade="all, delete-orphan",
    )

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at = Column(
        DateTime(timezone=True),
        onupdate=func.now(),
        nullable=True,
    )


class RecipeLine(Base):
    """
    One ingredient of a cocktail, kept in recipe order by `position`.
    """
    __tablename__ = "recipe_lines"

    id = Column(Integer, primary_key=True, index=True)
    cocktail_id = Column(String(64), ForeignKey("cocktails.id", ondelete="CASCADE"), index=True, nullable=False)
    position = Column(Integer, nullable=False, default=0)

    ingredient_id = Column(String(64), nullable=False)
    volume_ml = Column(Float, nullable=False)
    dispense_class = Column(String(16), nullable=False, default="automatic")   # automatic / manual
    pour_style = Column(String(16), nullable=False, default="immediate")       # immediate / float
    instructions = Column(String(255), nullable=True)

    cocktail = relationship("Cocktail", back_populates="lines")
