# cocktailbot/db/models/tank_level.py

from sqlalchemy import Column, Integer, Float, DateTime, func
from cocktailbot.db.session import Base


class TankLevel(Base):
    """
    Fill level of the container feeding one pump (0 <= current_ml <= capacity_ml).
    """
    __tablename__ = "tank_levels"

    pump_id = Column(Integer, primary_key=True, index=True)
    current_ml = Column(Float, nullable=False, default=0.0)
    capacity_ml = Column(Float, nullable=False)

    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=True,
    )
