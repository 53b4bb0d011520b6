"""
Sample data generator for testing.

Generates realistic-looking LeafSpy rows and complete CSV log files.
"""

import csv
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

import numpy as np

from leafspy.models.dataline import CELL_PAIR_COUNT
from leafspy.services.decoder import DATETIME_FORMAT, HEADER
from leafspy.utils.units import c_to_f


# Raw column text for a parked car with a healthy pack, in file order.
# Values are raw device encodings (before scaling).
SAMPLE_ROW = {
    "date_time": "2015/06/14 09:30:00",
    "latitude": "37 46.494",
    "longitude": "122 25.164W",
    "elevation": "16",
    "speed": "0",
    "gids": "245",
    "soc": "812345",
    "amp_hours": "545280",
    "pack_volts": "387.12",
    "pack_amps": "-1.5",
    "max_cp_mv": "4035",
    "min_cp_mv": "4027",
    "avg_cp_mv": "4031",
    "cp_mv_diff": "8",
    "judgment": "0",
    "pack_t1_f": "71.6",
    "pack_t1_c": "22.0",
    "pack_t2_f": "72.5",
    "pack_t2_c": "22.5",
    "pack_t3_f": "none",
    "pack_t3_c": "none",
    "pack_t4_f": "71.1",
    "pack_t4_c": "21.7",
    "bat_12v_amps": "0.43",
    "vin": "1N4AZ0CP5FC300000",
    "hx": "98.67",
    "bat_12v_volts": "12.85",
    "odometer_km": "12345.6",
    "quick_charges": "12",
    "l1_l2_charges": "345",
    "tire_pressure_fl": "38.0",
    "tire_pressure_fr": "37.5",
    "tire_pressure_rr": "36.5",
    "tire_pressure_rl": "36.0",
    "ambient_f": "68.0",
    "soh": "92.15",
    "regen_wh": "1520",
    "b_level": "11",
    "epoch_time": "1434274200",
    "motor_power_w": "0",
    "aux_power_w": "5",
    "ac_power_w": "2",
    "ac_comp": "8",
    "est_ac_power_w": "3",
    "est_heater_power_w": "1",
    "plug_state": "0",
    "charge_mode": "0",
    "obc_out_power": "0",
    "gear": "1",
    "hv_volt1": "386.5",
    "hv_volt2": "386.0",
    "gps_status": "GPS_OK",
    "power_switch": "true",
    "bms": "true",
    "obc": "false",
    "debug": "",
    "motor_temp_c": "70",
    "inverter2_temp_c": "65",
    "inverter4_temp_c": "66",
    "speed_sensor1_kph": "0",
    "speed_sensor2_kph": "0",
    "wiper_status": "Off",
    "torque_nm": "0.0",
}

_SPLIT = list(SAMPLE_ROW).index("bat_12v_amps")

FIELD_ORDER: tuple[str, ...] = (
    *list(SAMPLE_ROW)[:_SPLIT],
    *(f"cp{i}" for i in range(1, CELL_PAIR_COUNT + 1)),
    *list(SAMPLE_ROW)[_SPLIT:],
)


def build_sample_fields(
    cell_pairs: Optional[list[int]] = None,
    **overrides: str,
) -> list[str]:
    """
    Build the 159 raw text fields of one LeafSpy row.

    Args:
        cell_pairs: 96 cell pair voltages in mV (defaults to a flat 4031 mV)
        **overrides: Raw text per field name, e.g. aux_power_w="7" or cp12="x"

    Returns:
        List of text fields in file order
    """
    values = dict(SAMPLE_ROW)
    if cell_pairs is None:
        cell_pairs = [4031] * CELL_PAIR_COUNT
    if len(cell_pairs) != CELL_PAIR_COUNT:
        raise ValueError(f"Expected {CELL_PAIR_COUNT} cell pairs, got {len(cell_pairs)}")
    for i, mv in enumerate(cell_pairs, start=1):
        values[f"cp{i}"] = str(mv)

    for key, text in overrides.items():
        if key not in FIELD_ORDER:
            raise KeyError(f"Unknown field: {key}")
        values[key] = text

    return [values[key] for key in FIELD_ORDER]


def _degrees_minutes(value: float, positive: str, negative: str) -> str:
    hemisphere = positive if value >= 0 else negative
    value = abs(value)
    degrees = int(value)
    minutes = round((value - degrees) * 60.0, 4)
    if minutes >= 60.0:
        degrees += 1
        minutes -= 60.0
    return f"{degrees} {minutes:.4f}{hemisphere}"


def generate_drive_log(
    output_path: Path,
    duration_s: float = 120.0,
    sample_rate_hz: float = 1.0,
    start_time: datetime = datetime(2015, 6, 14, 9, 30, 0),
    center_lat: float = 37.7749,  # Example: San Francisco
    center_lon: float = -122.4194,
    max_speed_kph: float = 60.0,
    seed: Optional[int] = None,
) -> Path:
    """
    Generate a LeafSpy log of a short drive.

    The car accelerates to max_speed_kph, cruises and comes to a stop while
    the state of charge slowly drops and the pack warms up.
    """
    rng = np.random.default_rng(seed)
    n_samples = max(int(duration_s * sample_rate_hz), 1)
    offsets = np.linspace(0, duration_s, n_samples)

    # Trapezoidal speed profile
    ramp = np.clip(offsets / (duration_s * 0.2), 0, 1)
    ramp_down = np.clip((duration_s - offsets) / (duration_s * 0.2), 0, 1)
    speed_kph = max_speed_kph * np.minimum(ramp, ramp_down)

    # Drive east along a straight road
    meters_per_deg_lon = 111000 * np.cos(np.radians(center_lat))
    distance_m = np.cumsum(speed_kph / 3.6 / sample_rate_hz)
    lon = center_lon + distance_m / meters_per_deg_lon
    lat = np.full(n_samples, center_lat) + rng.normal(0, 1e-6, n_samples)

    soc = 812345 - np.cumsum(speed_kph * 3).astype(np.int64)
    pack_amps = speed_kph * 1.8 + rng.normal(0, 0.5, n_samples)
    pack_temp_c = 22.0 + offsets / duration_s * 1.5

    with open(output_path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(HEADER)
        for i in range(n_samples):
            stamp = start_time + timedelta(seconds=float(offsets[i]))
            cells = (4031 + rng.integers(-4, 5, CELL_PAIR_COUNT)).tolist()
            temp_c = round(float(pack_temp_c[i]), 1)
            fields = build_sample_fields(
                cell_pairs=cells,
                date_time=stamp.strftime(DATETIME_FORMAT),
                latitude=_degrees_minutes(float(lat[i]), "N", "S"),
                longitude=_degrees_minutes(float(lon[i]), "E", "W"),
                speed=str(int(round(speed_kph[i]))),
                soc=str(int(soc[i])),
                pack_amps=f"{pack_amps[i]:.2f}",
                max_cp_mv=str(max(cells)),
                min_cp_mv=str(min(cells)),
                avg_cp_mv=str(int(round(sum(cells) / len(cells)))),
                cp_mv_diff=str(max(cells) - min(cells)),
                pack_t1_c=f"{temp_c:.1f}",
                pack_t1_f=f"{c_to_f(temp_c):.1f}",
                epoch_time=str(int(stamp.timestamp())),
                gear="4" if speed_kph[i] > 0 else "1",
                speed_sensor1_kph=str(int(round(speed_kph[i] * 100))),
                speed_sensor2_kph=str(int(round(speed_kph[i] * 100))),
            )
            writer.writerow(fields)

    return output_path
