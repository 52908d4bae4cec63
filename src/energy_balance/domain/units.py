"""Metric/imperial conversions for body measurements."""

from enum import StrEnum

CM_PER_INCH = 2.54
KG_PER_POUND = 0.453592


class UnitSystem(StrEnum):
    """Measurement system used for profile input and display."""

    METRIC = "metric"
    IMPERIAL = "imperial"


def cm_to_in(cm: float) -> float:
    """Convert centimeters to inches."""
    return cm / CM_PER_INCH


def in_to_cm(inches: float) -> float:
    """Convert inches to centimeters."""
    return inches * CM_PER_INCH


def kg_to_lb(kg: float) -> float:
    """Convert kilograms to pounds."""
    return kg / KG_PER_POUND


def lb_to_kg(lb: float) -> float:
    """Convert pounds to kilograms."""
    return lb * KG_PER_POUND


def height_to_cm(value: float, units: UnitSystem) -> float:
    """Normalize a height given in ``units`` to centimeters."""
    if units == UnitSystem.IMPERIAL:
        return in_to_cm(value)
    return value


def weight_to_kg(value: float, units: UnitSystem) -> float:
    """Normalize a weight given in ``units`` to kilograms."""
    if units == UnitSystem.IMPERIAL:
        return lb_to_kg(value)
    return value
