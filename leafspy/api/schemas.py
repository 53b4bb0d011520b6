"""
API schemas (Pydantic models) for request/response validation.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel


# ============================================================================
# Log Schemas
# ============================================================================

class LogSummaryResponse(BaseModel):
    """Summary of a LeafSpy log for listing."""
    id: str
    name: str
    source_file: str
    recorded_at: Optional[str] = None
    duration_s: float
    sample_count: int
    skipped_count: int
    vin: Optional[str] = None


class SkippedRowResponse(BaseModel):
    """A row that was not decoded."""
    line_number: int
    reason: str


class LogDetailResponse(LogSummaryResponse):
    """Summary plus the rows that were skipped while reading."""
    skipped: list[SkippedRowResponse]


class LocationResponse(BaseModel):
    """GPS position of a sample."""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    elevation: Optional[float] = None


class RecordResponse(BaseModel):
    """One decoded sample, values in physical units."""
    date_time: datetime
    location: LocationResponse

    speed: int
    gids: int
    soc: int
    amp_hours: int
    pack_volts: float
    pack_amps: float

    max_cp_mv: int
    min_cp_mv: int
    avg_cp_mv: int
    cp_mv_diff: int
    judgment: int

    pack_t1_f: float
    pack_t1_c: float
    pack_t2_f: float
    pack_t2_c: float
    pack_t3_f: float
    pack_t3_c: float
    pack_t4_f: float
    pack_t4_c: float

    cell_pairs: dict[int, int]

    bat_12v_amps: float
    vin: str
    hx: float
    bat_12v_volts: float
    odometer_km: float
    quick_charges: int
    l1_l2_charges: int

    tire_pressure_fl: float
    tire_pressure_fr: float
    tire_pressure_rr: float
    tire_pressure_rl: float

    ambient_f: float
    soh: float
    regen_wh: int
    b_level: int
    epoch_time: float

    motor_power_w: int
    aux_power_w: int
    ac_power_w: int
    ac_comp: int
    est_ac_power_w: int
    est_heater_power_w: int

    plug_state: int
    plug_state_label: Optional[str] = None
    charge_mode: int
    charge_mode_label: Optional[str] = None
    obc_out_power: int
    gear: int
    gear_label: Optional[str] = None

    hv_volt1: float
    hv_volt2: float
    gps_status: str

    power_switch: bool
    bms: bool
    obc: bool
    debug: str

    motor_temp_c: int
    inverter2_temp_c: int
    inverter4_temp_c: int
    speed_sensor1_kph: float
    speed_sensor2_kph: float

    wiper_status: str
    torque_nm: float


class RecordPageResponse(BaseModel):
    """A page of decoded records."""
    log_id: str
    offset: int
    limit: int
    total: int
    records: list[RecordResponse]


# ============================================================================
# Folder Management Schemas
# ============================================================================

class SetFolderRequest(BaseModel):
    """Request to set the data folder."""
    path: str


class FolderInfoResponse(BaseModel):
    """Information about the current data folder."""
    path: Optional[str]
    log_count: int


# ============================================================================
# Error Schemas
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    detail: str
    code: Optional[str] = None
