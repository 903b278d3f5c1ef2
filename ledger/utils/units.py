from decimal import Decimal
from typing import Optional


DEFAULT_WEIGHT_UNIT = "ton"

# Grams per unit. The long labels are what older snapshots stored.
GRAMS_PER_UNIT = {
    "mg": Decimal("0.001"),
    "g": Decimal("1"),
    "kg": Decimal("1000"),
    "ton": Decimal("1000000"),
    "lb": Decimal("453.592"),
    "milligram (mg)": Decimal("0.001"),
    "gram (g)": Decimal("1"),
    "kilogram (kg)": Decimal("1000"),
    "pound (lb)": Decimal("453.592"),
}


def grams_per_unit(unit: Optional[str]) -> Decimal:
    """Gram factor of a unit label; unknown or empty labels count as tons."""
    key = (unit or DEFAULT_WEIGHT_UNIT).strip().lower()
    return GRAMS_PER_UNIT.get(key, GRAMS_PER_UNIT[DEFAULT_WEIGHT_UNIT])


def convert_weight(weight: Decimal, from_unit: Optional[str], to_unit: Optional[str]) -> Decimal:
    if from_unit == to_unit or not weight:
        return Decimal(weight)
    grams = Decimal(weight) * grams_per_unit(from_unit)
    return grams / grams_per_unit(to_unit)
