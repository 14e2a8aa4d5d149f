# cocktailbot/core/errors.py

from typing import Any, Dict, List, Optional


class DispenseError(Exception):
    """Base class for everything that can stop a dispense.

    `kind` is the stable identifier the HTTP layer and the touchscreen use to
    pick a message; `partial` is True only when pumps may already have run.
    """

    kind = "dispense_error"
    partial = False

    def __init__(
        self,
        message: str,
        ingredient_id: Optional[str] = None,
        pump_id: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.ingredient_id = ingredient_id
        self.pump_id = pump_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "message": self.message,
            "ingredient_id": self.ingredient_id,
            "pump_id": self.pump_id,
            "partial": self.partial,
        }


# ===== pre-flight (no pump has been touched) =====

class InvalidRecipe(DispenseError):
    kind = "invalid_recipe"


class UnresolvedIngredient(DispenseError):
    kind = "unresolved_ingredient"

    def __init__(self, ingredient_id: str) -> None:
        super().__init__(
            f"No enabled pump configured for ingredient: {ingredient_id}",
            ingredient_id=ingredient_id,
        )


class CalibrationFault(DispenseError):
    kind = "calibration_fault"

    def __init__(self, pump_id: int, ingredient_id: Optional[str] = None, flow_rate: float = 0.0) -> None:
        super().__init__(
            f"Pump {pump_id} has an invalid flow rate ({flow_rate} ml/s); recalibrate it",
            ingredient_id=ingredient_id,
            pump_id=pump_id,
        )
        self.flow_rate = flow_rate


class InsufficientStock(DispenseError):
    kind = "insufficient_stock"

    def __init__(self, missing: List[str]) -> None:
        super().__init__(
            "Not enough ingredients available: " + ", ".join(missing),
            ingredient_id=missing[0] if missing else None,
        )
        self.missing = list(missing)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["missing_ingredients"] = self.missing
        return data


class MachineBusy(DispenseError):
    kind = "machine_busy"

    def __init__(self) -> None:
        super().__init__("Another dispense is already running")


# ===== in-flight (pumps may have run) =====

class ActuatorFault(DispenseError):
    kind = "actuator_fault"
    partial = True

    def __init__(
        self,
        message: str,
        pump_id: Optional[int] = None,
        address: Optional[int] = None,
        ingredient_id: Optional[str] = None,
        report: Any = None,
    ) -> None:
        super().__init__(message, ingredient_id=ingredient_id, pump_id=pump_id)
        self.address = address
        self.report = report


class DispenseCancelled(DispenseError):
    kind = "cancelled"
    partial = True

    def __init__(self, report: Any = None) -> None:
        super().__init__("Dispense cancelled before all batches were started")
        self.report = report
