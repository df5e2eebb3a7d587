"""Gas volume to energy conversion."""

# Standard estimate used on UK bills, not metered per reading
CALORIFIC_VALUE = 40.0  # MJ/m3
VOLUME_CORRECTION = 1.02264
MJ_PER_KWH = 3.6


def m3_to_kwh(cubic_meters: float) -> float:
    """Convert a gas meter reading in m3 to kWh."""
    return cubic_meters * CALORIFIC_VALUE * VOLUME_CORRECTION / MJ_PER_KWH
