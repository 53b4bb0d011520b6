"""
Vehicle state codes reported by LeafSpy.

Codes are kept as plain integers on decoded records. The logger may emit
codes outside these tables, so nothing here is used to reject a row.
"""

from typing import Optional


# Plug state
PLUG_STATE_NOT_PLUGGED = 0
PLUG_STATE_PARTIAL_PLUGGED = 1
PLUG_STATE_PLUGGED = 2

# Charge mode
CHARGE_MODE_NOT_CHARGING = 0
CHARGE_MODE_L1 = 1
CHARGE_MODE_L2 = 2
CHARGE_MODE_L3 = 3

# Gear
GEAR_NOT_READY = 0
GEAR_PARK = 1
GEAR_REVERSE = 2
GEAR_NEUTRAL = 3
GEAR_DRIVE = 4
GEAR_B_ECO = 7


PLUG_STATE_LABELS = {
    PLUG_STATE_NOT_PLUGGED: "not plugged",
    PLUG_STATE_PARTIAL_PLUGGED: "partially plugged",
    PLUG_STATE_PLUGGED: "plugged",
}

CHARGE_MODE_LABELS = {
    CHARGE_MODE_NOT_CHARGING: "not charging",
    CHARGE_MODE_L1: "L1",
    CHARGE_MODE_L2: "L2",
    CHARGE_MODE_L3: "L3",
}

GEAR_LABELS = {
    GEAR_NOT_READY: "not ready",
    GEAR_PARK: "park",
    GEAR_REVERSE: "reverse",
    GEAR_NEUTRAL: "neutral",
    GEAR_DRIVE: "drive",
    GEAR_B_ECO: "B/eco drive",
}


def describe_plug_state(code: int) -> Optional[str]:
    return PLUG_STATE_LABELS.get(code)


def describe_charge_mode(code: int) -> Optional[str]:
    return CHARGE_MODE_LABELS.get(code)


def describe_gear(code: int) -> Optional[str]:
    """Label for a gear code, or None if the code is not a known one."""
    return GEAR_LABELS.get(code)
