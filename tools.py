import math
from typing import Iterable, Optional

SQLITE_INT_MAX = 2**63 - 1


class MathTools:
    """Numeric helpers for workout payloads."""

    @staticmethod
    def to_number(value) -> float:
        """Return ``value`` as a float, or ``0.0`` when it is missing or unparseable."""
        number = MathTools.parse_float(value)
        return 0.0 if number is None else number

    @staticmethod
    def parse_float(value) -> Optional[float]:
        """Parse user input into a finite float, ``None`` when impossible."""
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, str):
            value = value.strip().replace(",", ".")
            if not value:
                return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(number):
            return None
        return number

    @staticmethod
    def parse_int(value) -> Optional[int]:
        """Parse user input into an int, truncating decimals."""
        number = MathTools.parse_float(value)
        if number is None:
            return None
        return int(number)

    @staticmethod
    def set_volume(weight, repetitions) -> float:
        """Volume of a single set as weight times repetitions."""
        return MathTools.to_number(weight) * MathTools.to_number(repetitions)

    @staticmethod
    def workout_volume(sessions: Iterable[dict]) -> float:
        """Sum of weight times repetitions over every set of every session."""
        vol = 0.0
        for session in sessions:
            for entry in session.get("sets") or []:
                vol += MathTools.set_volume(
                    entry.get("weight"), entry.get("repetitions")
                )
        return vol
