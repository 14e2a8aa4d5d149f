# cocktailbot/db/models/pump.py

from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, func
from cocktailbot.db.session import Base


class Pump(Base):
    """
    A physical pump: which ingredient it carries, where it is wired and how
    fast it pours (set by calibration).
    """
    __tablename__ = "pumps"

    id = Column(Integer, primary_key=True, index=True)   # stable pump number
    ingredient_id = Column(String(64), nullable=True)
    pin = Column(Integer, nullable=False)                # BCM GPIO pin
    flow_rate = Column(Float, nullable=False, default=1.0)   # ml/s
    enabled = Column(Boolean, nullable=False, default=True)

    updated_at = Column(
        DateTime(timezone=True),
        onupdate=func.now(),
        nullable=True,
    )
