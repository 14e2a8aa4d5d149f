# cocktailbot/db/models/dispense_run.py

from sqlalchemy import Column, Integer, String, Float, DateTime, func
from cocktailbot.db.session import Base


class DispenseRun(Base):
    """
    Log of one dispense request (cocktail or shot), whatever its outcome.
    """
    __tablename__ = "dispense_runs"

    id = Column(Integer, primary_key=True, index=True)
    kind = Column(String(16), nullable=False)          # cocktail / shot
    target_id = Column(String(64), index=True, nullable=False)
    size_ml = Column(Float, nullable=False)

    status = Column(String(16), nullable=False)        # COMPLETED / FAILED / REJECTED / CANCELLED
    error_kind = Column(String(32), nullable=True)
    error_detail = Column(String(255), nullable=True)

    batches_total = Column(Integer, nullable=False, default=0)
    batches_completed = Column(Integer, nullable=False, default=0)
    elapsed_ms = Column(Integer, nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
