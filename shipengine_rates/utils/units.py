import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# store unit code -> ShipEngine weight unit; no numeric conversion between them
WEIGHT_UNITS = {
    "g": "gram",
    "kg": "kilogram",
    "lbs": "pound",
    "oz": "ounce",
}

# store unit code -> (ShipEngine dimension unit, scale factor)
DIMENSION_UNITS = {
    "cm": ("centimeter", 1),
    "m": ("centimeter", 100),
    "mm": ("centimeter", 0.1),
    "in": ("inch", 1),
}

PRECISION = 3


def _round(value: Optional[float]) -> float:
    if not value:
        return 0
    return round(float(value), PRECISION)


def convert_weight(value: Optional[float], unit: Optional[str]) -> Dict[str, Any]:
    """
    Map a weight to ShipEngine's weight object.

    Args:
        value: Raw weight, missing values become 0.
        unit: Store unit code (g, kg, lbs, oz).

    Returns:
        dict: {"value": ..., "unit": ...}. The unit is left out when the code
              isn't recognized so ShipEngine reports the gap instead of us
              guessing a unit.
    """
    weight: Dict[str, Any] = {"value": _round(value)}

    canonical = WEIGHT_UNITS.get(unit) if unit else None
    if canonical:
        weight["unit"] = canonical
    else:
        logger.debug("Unrecognized weight unit %r, unit omitted", unit)

    return weight


def convert_dimensions(
    length: Optional[float],
    width: Optional[float],
    height: Optional[float],
    unit: Optional[str],
) -> Dict[str, Any]:
    """
    Map package dimensions to ShipEngine's dimensions object.

    Metric units are normalized to centimeters, inches pass through.
    """
    dimensions: Dict[str, Any] = {
        "length": _round(length),
        "width": _round(width),
        "height": _round(height),
    }

    mapping = DIMENSION_UNITS.get(unit) if unit else None
    if mapping is None:
        logger.debug("Unrecognized dimension unit %r, unit omitted", unit)
        return dimensions

    canonical, scale = mapping
    if scale != 1:
        for side in ("length", "width", "height"):
            dimensions[side] = round(dimensions[side] * scale, PRECISION)
    dimensions["unit"] = canonical

    return dimensions
