"""
Decoded LeafSpy telemetry sample.

One DataLine is produced per CSV row. Values are stored in physical units:
power in watts, temperatures in degrees, speeds in km/h. Raw device
encodings (100 W steps, Celsius + 40, km/h x 100) never reach this model.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from leafspy.models.location import Location
from leafspy.models.states import (
    describe_charge_mode,
    describe_gear,
    describe_plug_state,
)


CELL_PAIR_COUNT = 96


class CellPairTable(dict):
    """
    Read-only mapping of cell pair index (1..96) to voltage in mV.

    Stays a dict so dataclasses.asdict() and pydantic accept it as one.
    """

    def _readonly(self, *args, **kwargs):
        raise TypeError("cell pair table is read-only")

    __setitem__ = _readonly
    __delitem__ = _readonly
    __ior__ = _readonly
    clear = _readonly
    pop = _readonly
    popitem = _readonly
    setdefault = _readonly
    update = _readonly

    def __reduce__(self):
        return (type(self), (dict(self),))


@dataclass(frozen=True)
class DataLine:
    """
    A single line of a LeafSpy CSV log.

    Fields follow the column order of the log file. The four pack temperature
    pairs are 0.0 when the logger wrote "none" for them.
    """

    date_time: datetime
    location: Location

    # Drive / battery summary
    speed: int
    gids: int
    soc: int
    amp_hours: int
    pack_volts: float
    pack_amps: float

    # Cell pair voltage statistics (mV)
    max_cp_mv: int
    min_cp_mv: int
    avg_cp_mv: int
    cp_mv_diff: int
    judgment: int

    # Pack temperature sensors (F / C pairs)
    pack_t1_f: float
    pack_t1_c: float
    pack_t2_f: float
    pack_t2_c: float
    pack_t3_f: float
    pack_t3_c: float
    pack_t4_f: float
    pack_t4_c: float

    # Cell pair index (1..96) -> voltage in mV
    cell_pairs: CellPairTable = field(repr=False)

    bat_12v_amps: float
    vin: str
    hx: float
    bat_12v_volts: float
    odometer_km: float
    quick_charges: int
    l1_l2_charges: int

    # Tire pressures
    tire_pressure_fl: float
    tire_pressure_fr: float
    tire_pressure_rr: float
    tire_pressure_rl: float

    ambient_f: float
    soh: float
    regen_wh: int
    b_level: int
    epoch_time: float

    # Power figures (W)
    motor_power_w: int
    aux_power_w: int
    ac_power_w: int
    ac_comp: int
    est_ac_power_w: int
    est_heater_power_w: int

    # Raw state codes, see leafspy.models.states
    plug_state: int
    charge_mode: int
    obc_out_power: int
    gear: int

    hv_volt1: float
    hv_volt2: float
    gps_status: str

    power_switch: bool
    bms: bool
    obc: bool

    debug: str

    # Drivetrain temperatures (C)
    motor_temp_c: int
    inverter2_temp_c: int
    inverter4_temp_c: int

    # Wheel speed sensors (km/h)
    speed_sensor1_kph: float
    speed_sensor2_kph: float

    wiper_status: str
    torque_nm: float

    def __post_init__(self):
        if not isinstance(self.cell_pairs, CellPairTable):
            object.__setattr__(self, "cell_pairs", CellPairTable(self.cell_pairs))

    @property
    def plug_state_label(self) -> Optional[str]:
        return describe_plug_state(self.plug_state)

    @property
    def charge_mode_label(self) -> Optional[str]:
        return describe_charge_mode(self.charge_mode)

    @property
    def gear_label(self) -> Optional[str]:
        return describe_gear(self.gear)

    @property
    def cell_pair_spread_mv(self) -> int:
        """Difference between the highest and lowest cell pair voltage."""
        values = self.cell_pairs.values()
        return max(values) - min(values)
