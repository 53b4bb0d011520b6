"""
Tests for the LeafSpy row decoder.
"""

import dataclasses
import math
from datetime import datetime

import pytest

from leafspy.models.dataline import CELL_PAIR_COUNT
from leafspy.services.decoder import (
    COLUMNS,
    FIELD_COUNT,
    HEADER,
    DecodeError,
    FieldParseError,
    RowDecoder,
    SchemaMismatchError,
    decode_row,
)
from leafspy.utils.location import LocationParseError
from leafspy.utils.sample_data import build_sample_fields


EPS = 1e-5

OPTIONAL_TEMPERATURES = [
    "pack_t1_f", "pack_t1_c",
    "pack_t2_f", "pack_t2_c",
    "pack_t3_f", "pack_t3_c",
    "pack_t4_f", "pack_t4_c",
]


@pytest.fixture
def decoder():
    return RowDecoder()


@pytest.fixture
def sample_fields():
    """Raw fields of a valid row."""
    return build_sample_fields()


class TestColumnLayout:
    """Tests for the column table."""

    def test_layout_covers_every_field(self):
        """Column widths should add up to the row width."""
        assert sum(c.width for c in COLUMNS) == FIELD_COUNT
        assert len(HEADER) == FIELD_COUNT == 159

    def test_header_positions(self):
        """Header labels should sit at their LeafSpy column positions."""
        assert HEADER[0] == "Date/Time"
        assert HEADER[1:4] == ("Lat", "Long", "Elv")
        assert HEADER[23] == "CP1"
        assert HEADER[118] == "CP96"
        assert HEADER[136] == "Aux Pwr(100w)"
        assert HEADER[152] == "Motor Temp"
        assert HEADER[158] == "Torque Nm"

    def test_sample_row_width(self, sample_fields):
        assert len(sample_fields) == FIELD_COUNT


class TestValidRow:
    """Tests for decoding well-formed rows."""

    def test_decode_sample_row(self, decoder, sample_fields):
        """A valid row should decode into a fully populated record."""
        line = decoder.decode(sample_fields)

        assert line.date_time == datetime(2015, 6, 14, 9, 30, 0)
        assert line.gids == 245
        assert line.soc == 812345
        assert abs(line.pack_volts - 387.12) < EPS
        assert abs(line.pack_amps - (-1.5)) < EPS
        assert line.cp_mv_diff == 8
        assert line.vin == "1N4AZ0CP5FC300000"
        assert abs(line.odometer_km - 12345.6) < EPS
        assert line.quick_charges == 12
        assert line.gps_status == "GPS_OK"
        assert line.wiper_status == "Off"
        assert line.debug == ""

    def test_location_decoded(self, decoder, sample_fields):
        """Location columns should be handed to the location parser."""
        line = decoder.decode(sample_fields)

        assert abs(line.location.latitude - (37 + 46.494 / 60)) < EPS
        assert abs(line.location.longitude - -(122 + 25.164 / 60)) < EPS
        assert line.location.elevation == 16.0

    def test_decode_row_function(self, sample_fields):
        """Module-level decode_row should match RowDecoder.decode."""
        assert decode_row(sample_fields) == RowDecoder().decode(sample_fields)

    def test_decoder_is_reusable(self, decoder, sample_fields):
        """Decoding should not depend on previously decoded rows."""
        first = decoder.decode(build_sample_fields(speed="42"))
        second = decoder.decode(sample_fields)

        assert first.speed == 42
        assert second.speed == 0

    def test_record_is_immutable(self, decoder, sample_fields):
        line = decoder.decode(sample_fields)

        with pytest.raises(dataclasses.FrozenInstanceError):
            line.speed = 10

    def test_signed_integers(self, decoder):
        line = decoder.decode(build_sample_fields(motor_power_w="-4500", regen_wh="+12"))

        assert line.motor_power_w == -4500
        assert line.regen_wh == 12

    def test_exponent_floats(self, decoder):
        line = decoder.decode(build_sample_fields(torque_nm="1.5e2"))

        assert line.torque_nm == 150.0


class TestScaledFields:
    """Tests for raw encoding to physical unit conversion."""

    def test_aux_power_in_100w_steps(self, decoder):
        """Raw auxiliary power "5" should decode to 500 W."""
        line = decoder.decode(build_sample_fields(aux_power_w="5"))
        assert line.aux_power_w == 500

    def test_ac_power_in_250w_steps(self, decoder):
        line = decoder.decode(build_sample_fields(ac_power_w="3"))
        assert line.ac_power_w == 750

    def test_estimated_ac_power_in_50w_steps(self, decoder):
        line = decoder.decode(build_sample_fields(est_ac_power_w="7"))
        assert line.est_ac_power_w == 350

    def test_estimated_heater_power_in_250w_steps(self, decoder):
        line = decoder.decode(build_sample_fields(est_heater_power_w="4"))
        assert line.est_heater_power_w == 1000

    def test_motor_temperature_offset(self, decoder):
        """Raw motor temperature "30" should decode to -10 C."""
        line = decoder.decode(build_sample_fields(motor_temp_c="30"))
        assert line.motor_temp_c == -10

    def test_inverter_temperature_offsets(self, decoder):
        line = decoder.decode(build_sample_fields(inverter2_temp_c="85", inverter4_temp_c="0"))

        assert line.inverter2_temp_c == 45
        assert line.inverter4_temp_c == -40

    def test_speed_sensors_in_hundredths(self, decoder):
        """Raw "2495" should decode to 24.95 km/h."""
        line = decoder.decode(build_sample_fields(
            speed_sensor1_kph="2495",
            speed_sensor2_kph="2500",
        ))

        assert abs(line.speed_sensor1_kph - 24.95) < EPS
        assert abs(line.speed_sensor2_kph - 25.0) < EPS

    def test_unscaled_power_fields(self, decoder):
        """Fields without a scale should be stored as logged."""
        line = decoder.decode(build_sample_fields(motor_power_w="12000", ac_comp="8"))

        assert line.motor_power_w == 12000
        assert line.ac_comp == 8


class TestOptionalTemperatures:
    """Tests for the "none" sentinel on pack temperatures."""

    @pytest.mark.parametrize("name", OPTIONAL_TEMPERATURES)
    def test_none_reads_as_zero(self, decoder, name):
        """"none" should leave the field at 0.0 and decode the rest."""
        line = decoder.decode(build_sample_fields(**{name: "none"}))

        assert getattr(line, name) == 0.0
        assert line.aux_power_w == 500

    @pytest.mark.parametrize("name", OPTIONAL_TEMPERATURES)
    def test_value_parsed(self, decoder, name):
        line = decoder.decode(build_sample_fields(**{name: "23.5"}))
        assert abs(getattr(line, name) - 23.5) < EPS

    @pytest.mark.parametrize("token", ["None", "NONE", "n/a", ""])
    def test_other_tokens_rejected(self, decoder, token):
        """The sentinel match is exact and case-sensitive."""
        with pytest.raises(FieldParseError) as exc_info:
            decoder.decode(build_sample_fields(pack_t2_c=token))

        assert exc_info.value.name == "pack_t2_c"
        assert exc_info.value.index == 18

    def test_sentinel_only_on_temperatures(self, decoder):
        """Other float fields do not accept "none"."""
        with pytest.raises(FieldParseError) as exc_info:
            decoder.decode(build_sample_fields(pack_volts="none"))

        assert exc_info.value.name == "pack_volts"


class TestCellPairs:
    """Tests for the 96 cell pair voltage table."""

    def test_all_indices_present(self, decoder):
        cells = [4000 + i for i in range(CELL_PAIR_COUNT)]
        line = decoder.decode(build_sample_fields(cell_pairs=cells))

        assert sorted(line.cell_pairs) == list(range(1, 97))
        assert line.cell_pairs[1] == 4000
        assert line.cell_pairs[96] == 4095

    def test_spread(self, decoder):
        cells = [4031] * CELL_PAIR_COUNT
        cells[10] = 4020
        cells[50] = 4040
        line = decoder.decode(build_sample_fields(cell_pairs=cells))

        assert line.cell_pair_spread_mv == 20

    def test_table_is_read_only(self, decoder, sample_fields):
        line = decoder.decode(sample_fields)

        with pytest.raises(TypeError):
            line.cell_pairs[1] = -5
        with pytest.raises(TypeError):
            line.cell_pairs.update({1: -5})
        with pytest.raises(TypeError):
            del line.cell_pairs[1]

        assert line.cell_pairs[1] == 4031

    def test_table_survives_asdict(self, decoder, sample_fields):
        line = decoder.decode(sample_fields)

        data = dataclasses.asdict(line)

        assert data["cell_pairs"][96] == 4031
        assert len(data["cell_pairs"]) == CELL_PAIR_COUNT

    def test_bad_cell_fails_row(self, decoder):
        """A bad cell should abort the decode and name the cell."""
        with pytest.raises(FieldParseError) as exc_info:
            decoder.decode(build_sample_fields(cp12="x"))

        assert exc_info.value.name == "cp12"
        assert exc_info.value.index == 34
        assert exc_info.value.value == "x"

    def test_bad_cell_not_masked_by_later_cells(self, decoder):
        """A failure early in the table must surface even if later cells parse."""
        with pytest.raises(FieldParseError) as exc_info:
            decoder.decode(build_sample_fields(cp1="4031.5"))

        assert exc_info.value.name == "cp1"

    def test_last_cell_fails_row(self, decoder):
        with pytest.raises(FieldParseError) as exc_info:
            decoder.decode(build_sample_fields(cp96=""))

        assert exc_info.value.index == 118


class TestSchemaMismatch:
    """Tests for the column count check."""

    def test_short_row(self, decoder, sample_fields):
        """A row one field short should fail before any field is parsed."""
        with pytest.raises(SchemaMismatchError) as exc_info:
            decoder.decode(sample_fields[:-1])

        assert exc_info.value.expected == 159
        assert exc_info.value.actual == 158

    def test_long_row(self, decoder, sample_fields):
        with pytest.raises(SchemaMismatchError) as exc_info:
            decoder.decode(sample_fields + ["extra"])

        assert exc_info.value.actual == 160

    def test_empty_row(self, decoder):
        with pytest.raises(SchemaMismatchError):
            decoder.decode([])

    def test_checked_before_fields(self, decoder):
        """Column count is checked even when field 0 is garbage."""
        fields = build_sample_fields(date_time="garbage")[:158]

        with pytest.raises(SchemaMismatchError):
            decoder.decode(fields)

    def test_is_decode_error(self, decoder):
        with pytest.raises(DecodeError):
            decoder.decode(["x"] * 10)


class TestFieldErrors:
    """Tests for per-field syntax errors."""

    @pytest.mark.parametrize("text", [
        "2015-06-14 09:30:00",
        "2015/6/14 09:30:00",
        "2015/06/14 9:30:00",
        "2015/06/14T09:30:00",
        "2015/02/30 09:30:00",
        "2015/06/14 25:00:00",
        "\u0662\u0660\u0661\u0665/06/14 09:30:00",
        "",
    ])
    def test_invalid_date_time(self, decoder, text):
        with pytest.raises(FieldParseError) as exc_info:
            decoder.decode(build_sample_fields(date_time=text))

        assert exc_info.value.index == 0
        assert exc_info.value.name == "date_time"

    @pytest.mark.parametrize("text", [
        "1.5", " 5", "5 ", "1_000", "", "abc", "0x10", "\u0663\u0664",
    ])
    def test_invalid_integer(self, decoder, text):
        with pytest.raises(FieldParseError) as exc_info:
            decoder.decode(build_sample_fields(gids=text))

        assert exc_info.value.name == "gids"
        assert exc_info.value.index == 5

    @pytest.mark.parametrize("text", ["abc", "", " 1.0", "1_0.5", "12,5", "\u0661.\u0665"])
    def test_invalid_float(self, decoder, text):
        with pytest.raises(FieldParseError) as exc_info:
            decoder.decode(build_sample_fields(soh=text))

        assert exc_info.value.name == "soh"
        assert exc_info.value.index == 131

    @pytest.mark.parametrize("text", ["9" * 30, "9223372036854775808", "-9223372036854775809"])
    def test_integer_out_of_range(self, decoder, text):
        with pytest.raises(FieldParseError) as exc_info:
            decoder.decode(build_sample_fields(gids=text))

        assert exc_info.value.name == "gids"
        assert "out of range" in exc_info.value.reason

    def test_integer_range_limits(self, decoder):
        line = decoder.decode(build_sample_fields(
            gids="9223372036854775807",
            regen_wh="-9223372036854775808",
        ))

        assert line.gids == 2 ** 63 - 1
        assert line.regen_wh == -(2 ** 63)

    @pytest.mark.parametrize("text", ["1e999", "-1e999"])
    def test_float_overflow(self, decoder, text):
        with pytest.raises(FieldParseError) as exc_info:
            decoder.decode(build_sample_fields(soh=text))

        assert exc_info.value.name == "soh"
        assert "out of range" in exc_info.value.reason

    @pytest.mark.parametrize("text", ["inf", "+Inf", "-infinity"])
    def test_explicit_infinity_accepted(self, decoder, text):
        line = decoder.decode(build_sample_fields(soh=text))

        assert math.isinf(line.soh)

    def test_invalid_scaled_field(self, decoder):
        with pytest.raises(FieldParseError) as exc_info:
            decoder.decode(build_sample_fields(aux_power_w="5.5"))

        assert exc_info.value.name == "aux_power_w"
        assert exc_info.value.index == 136

    def test_invalid_offset_field(self, decoder):
        with pytest.raises(FieldParseError) as exc_info:
            decoder.decode(build_sample_fields(motor_temp_c="hot"))

        assert exc_info.value.name == "motor_temp_c"
        assert exc_info.value.index == 152

    def test_first_failure_reported(self, decoder):
        """The earliest bad field should be the one reported."""
        with pytest.raises(FieldParseError) as exc_info:
            decoder.decode(build_sample_fields(speed="fast", torque_nm="lots"))

        assert exc_info.value.name == "speed"
        assert exc_info.value.index == 4

    def test_error_message_locates_field(self, decoder):
        with pytest.raises(FieldParseError, match=r"Column 9 \(pack_amps\)"):
            decoder.decode(build_sample_fields(pack_amps="?"))

    def test_location_error_propagates_unchanged(self, decoder):
        """Location failures are raised by the location parser, not wrapped."""
        with pytest.raises(LocationParseError) as exc_info:
            decoder.decode(build_sample_fields(latitude="somewhere"))

        assert not isinstance(exc_info.value, FieldParseError)
        assert isinstance(exc_info.value, ValueError)


class TestBooleans:
    """Tests for the lenient boolean columns."""

    @pytest.mark.parametrize("token", ["1", "t", "T", "TRUE", "true", "True"])
    def test_true_tokens(self, decoder, token):
        line = decoder.decode(build_sample_fields(power_switch=token))
        assert line.power_switch is True

    @pytest.mark.parametrize("token", ["0", "f", "F", "FALSE", "false", "False"])
    def test_false_tokens(self, decoder, token):
        line = decoder.decode(build_sample_fields(bms=token))
        assert line.bms is False

    def test_unknown_token_tolerated(self, decoder):
        """An unrecognised token reads as False and the row still decodes."""
        line = decoder.decode(build_sample_fields(
            obc="yes",
            debug="dbg",
            motor_temp_c="30",
            torque_nm="12.5",
        ))

        assert line.obc is False
        assert line.debug == "dbg"
        assert line.motor_temp_c == -10
        assert line.torque_nm == 12.5


class TestStateCodes:
    """Tests for plug state, charge mode and gear codes."""

    def test_known_codes(self, decoder):
        line = decoder.decode(build_sample_fields(plug_state="2", charge_mode="3", gear="4"))

        assert line.plug_state == 2
        assert line.plug_state_label == "plugged"
        assert line.charge_mode_label == "L3"
        assert line.gear_label == "drive"

    def test_unknown_codes_kept(self, decoder):
        """Codes outside the known tables are stored as logged."""
        line = decoder.decode(build_sample_fields(plug_state="5", charge_mode="9", gear="6"))

        assert line.plug_state == 5
        assert line.charge_mode == 9
        assert line.gear == 6
        assert line.gear_label is None
        assert line.plug_state_label is None


class TestFreeText:
    """Tests for verbatim text columns."""

    def test_text_copied_verbatim(self, decoder):
        line = decoder.decode(build_sample_fields(
            vin=" 1N4AZ0CP5FC3 ",
            gps_status="",
            debug="a,b; c",
            wiper_status="Int 2",
        ))

        assert line.vin == " 1N4AZ0CP5FC3 "
        assert line.gps_status == ""
        assert line.debug == "a,b; c"
        assert line.wiper_status == "Int 2"
