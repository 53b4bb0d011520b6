"""
LeafSpy CSV row decoder.

Turns the 159 text fields of one LeafSpy log row into a DataLine. Columns
are described once in COLUMNS, in file order, and consumed in a single
ordered pass. The first column that fails to parse aborts the row.
"""

import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Sequence

from leafspy.models.dataline import CELL_PAIR_COUNT, DataLine
from leafspy.utils.location import parse_location


FIELD_COUNT = 159

DATETIME_FORMAT = "%Y/%m/%d %H:%M:%S"
NONE_TOKEN = "none"

TRUE_TOKENS = frozenset({"1", "t", "T", "TRUE", "true", "True"})

_DATETIME_RE = re.compile(r"\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2}", re.ASCII)
_INT_RE = re.compile(r"[+-]?\d+", re.ASCII)

INT_MIN = -(2 ** 63)
INT_MAX = 2 ** 63 - 1
_INF_TOKENS = frozenset({"inf", "infinity"})


class DecodeError(ValueError):
    """Base class for row decoding failures."""


class SchemaMismatchError(DecodeError):
    """Raised when a row does not have the expected number of columns."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Number of columns not appropriate: expected {expected}, got {actual}"
        )


class FieldParseError(DecodeError):
    """Raised when a single column cannot be converted to its type."""

    def __init__(self, index: int, name: str, value: str, reason: str):
        self.index = index
        self.name = name
        self.value = value
        self.reason = reason
        super().__init__(f"Column {index} ({name}): {reason}")


# ============================================================================
# Field parsers
# ============================================================================

def parse_int(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"invalid integer {text!r}")
    value = int(text)
    if not INT_MIN <= value <= INT_MAX:
        raise ValueError(f"integer out of range {text!r}")
    return value


def parse_float(text: str) -> float:
    # float() tolerates padding, digit-group underscores and non-ASCII digits;
    # the log never has them
    if text != text.strip() or "_" in text or not text.isascii():
        raise ValueError(f"invalid number {text!r}")
    try:
        value = float(text)
    except ValueError:
        raise ValueError(f"invalid number {text!r}") from None
    if math.isinf(value) and text.lstrip("+-").lower() not in _INF_TOKENS:
        raise ValueError(f"number out of range {text!r}")
    return value


def parse_optional_float(text: str) -> float:
    """Float column that LeafSpy sets to "none" when the sensor is absent."""
    if text == NONE_TOKEN:
        return 0.0
    return parse_float(text)


def parse_bool(text: str) -> bool:
    """
    Boolean column.

    Unrecognised tokens read as False instead of failing the row.
    """
    if text in TRUE_TOKENS:
        return True
    return False


def parse_datetime(text: str) -> datetime:
    if not _DATETIME_RE.fullmatch(text):
        raise ValueError(f"expected YYYY/MM/DD HH:MM:SS, got {text!r}")
    try:
        return datetime.strptime(text, DATETIME_FORMAT)
    except ValueError as e:
        raise ValueError(f"invalid date/time {text!r}: {e}") from None


def parse_text(text: str) -> str:
    return text


def scaled(factor: int) -> Callable[[str], int]:
    """Integer column logged in steps of `factor` units."""
    def parse(text: str) -> int:
        return parse_int(text) * factor
    return parse


def offset(delta: int) -> Callable[[str], int]:
    """Integer column logged with `delta` added to the physical value."""
    def parse(text: str) -> int:
        return parse_int(text) - delta
    return parse


def divided(divisor: float) -> Callable[[str], float]:
    """Float column logged multiplied by `divisor`."""
    def parse(text: str) -> float:
        return parse_float(text) / divisor
    return parse


# ============================================================================
# Column layout
# ============================================================================

@dataclass(frozen=True)
class Column:
    """
    One logical field of a row.

    Most fields occupy a single CSV column. The location spans three; its
    parser receives all three texts and its errors are not wrapped.
    """

    name: str
    headers: tuple[str, ...]
    parse: Callable[..., Any]
    wrap_errors: bool = True

    @property
    def width(self) -> int:
        return len(self.headers)


def _col(name: str, header: str, parse: Callable[[str], Any]) -> Column:
    return Column(name=name, headers=(header,), parse=parse)


def _cell_pair_name(index: int) -> str:
    return f"cp{index}"


COLUMNS: tuple[Column, ...] = (
    _col("date_time", "Date/Time", parse_datetime),
    Column(
        name="location",
        headers=("Lat", "Long", "Elv"),
        parse=parse_location,
        wrap_errors=False,
    ),
    _col("speed", "Speed", parse_int),
    _col("gids", "Gids", parse_int),
    _col("soc", "SOC", parse_int),
    _col("amp_hours", "AHr", parse_int),
    _col("pack_volts", "Pack Volts", parse_float),
    _col("pack_amps", "Pack Amps", parse_float),
    _col("max_cp_mv", "Max CP mV", parse_int),
    _col("min_cp_mv", "Min CP mV", parse_int),
    _col("avg_cp_mv", "Avg CP mV", parse_int),
    _col("cp_mv_diff", "CP mV Diff", parse_int),
    _col("judgment", "Judgment Value", parse_int),
    _col("pack_t1_f", "Pack T1 F", parse_optional_float),
    _col("pack_t1_c", "Pack T1 C", parse_optional_float),
    _col("pack_t2_f", "Pack T2 F", parse_optional_float),
    _col("pack_t2_c", "Pack T2 C", parse_optional_float),
    _col("pack_t3_f", "Pack T3 F", parse_optional_float),
    _col("pack_t3_c", "Pack T3 C", parse_optional_float),
    _col("pack_t4_f", "Pack T4 F", parse_optional_float),
    _col("pack_t4_c", "Pack T4 C", parse_optional_float),
    *(
        _col(_cell_pair_name(i), f"CP{i}", parse_int)
        for i in range(1, CELL_PAIR_COUNT + 1)
    ),
    _col("bat_12v_amps", "12v Bat Amps", parse_float),
    _col("vin", "VIN", parse_text),
    _col("hx", "Hx", parse_float),
    _col("bat_12v_volts", "12v Bat Volts", parse_float),
    _col("odometer_km", "Odo(km)", parse_float),
    _col("quick_charges", "QC", parse_int),
    _col("l1_l2_charges", "L1/L2", parse_int),
    _col("tire_pressure_fl", "TP-FL", parse_float),
    _col("tire_pressure_fr", "TP-FR", parse_float),
    _col("tire_pressure_rr", "TP-RR", parse_float),
    _col("tire_pressure_rl", "TP-RL", parse_float),
    _col("ambient_f", "Ambient", parse_float),
    _col("soh", "SOH", parse_float),
    _col("regen_wh", "RegenWh", parse_int),
    _col("b_level", "BLevel", parse_int),
    _col("epoch_time", "epoch time", parse_float),
    _col("motor_power_w", "Motor Pwr(w)", parse_int),
    _col("aux_power_w", "Aux Pwr(100w)", scaled(100)),
    _col("ac_power_w", "A/C Pwr(250w)", scaled(250)),
    _col("ac_comp", "A/C Comp(0.1MPa)", parse_int),
    _col("est_ac_power_w", "Est Pwr A/C(50w)", scaled(50)),
    _col("est_heater_power_w", "Est Pwr Htr(250w)", scaled(250)),
    _col("plug_state", "Plug State", parse_int),
    _col("charge_mode", "Charge Mode", parse_int),
    _col("obc_out_power", "OBC Out Pwr", parse_int),
    _col("gear", "Gear", parse_int),
    _col("hv_volt1", "HVolt1", parse_float),
    _col("hv_volt2", "HVolt2", parse_float),
    _col("gps_status", "GPS Status", parse_text),
    _col("power_switch", "Power SW", parse_bool),
    _col("bms", "BMS", parse_bool),
    _col("obc", "OBC", parse_bool),
    _col("debug", "Debug", parse_text),
    _col("motor_temp_c", "Motor Temp", offset(40)),
    _col("inverter2_temp_c", "Inverter 2 Temp", offset(40)),
    _col("inverter4_temp_c", "Inverter 4 Temp", offset(40)),
    _col("speed_sensor1_kph", "Speed Sensor 1", divided(100)),
    _col("speed_sensor2_kph", "Speed Sensor 2", divided(100)),
    _col("wiper_status", "Wiper Status", parse_text),
    _col("torque_nm", "Torque Nm", parse_float),
)

HEADER: tuple[str, ...] = tuple(h for column in COLUMNS for h in column.headers)

_CELL_PAIR_NAMES = {_cell_pair_name(i): i for i in range(1, CELL_PAIR_COUNT + 1)}


# ============================================================================
# Decoder
# ============================================================================

class RowDecoder:
    """
    Stateless decoder for LeafSpy CSV rows.

    Safe to share between threads: decode() keeps all state in locals.
    """

    def decode(self, fields: Sequence[str]) -> DataLine:
        """
        Decode one row.

        Args:
            fields: Raw text fields of the row, header excluded

        Returns:
            Fully populated DataLine

        Raises:
            SchemaMismatchError: If the row has the wrong number of fields
            FieldParseError: For the first field that cannot be parsed
            LocationParseError: If the location columns are malformed
        """
        if len(fields) != FIELD_COUNT:
            raise SchemaMismatchError(FIELD_COUNT, len(fields))

        values: dict[str, Any] = {}
        cell_pairs: dict[int, int] = {}
        position = 0

        for column in COLUMNS:
            raw = fields[position:position + column.width]
            if column.wrap_errors:
                try:
                    value = column.parse(*raw)
                except ValueError as e:
                    raise FieldParseError(position, column.name, raw[0], str(e)) from e
            else:
                value = column.parse(*raw)

            cell_index = _CELL_PAIR_NAMES.get(column.name)
            if cell_index is not None:
                cell_pairs[cell_index] = value
            else:
                values[column.name] = value
            position += column.width

        return DataLine(cell_pairs=cell_pairs, **values)


_default_decoder = RowDecoder()


def decode_row(fields: Sequence[str]) -> DataLine:
    """
    Decode one LeafSpy row with the default column layout.
    """
    return _default_decoder.decode(fields)
