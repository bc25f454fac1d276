"""API response types for the smart-me REST API.

Pydantic models mirroring the JSON documents returned by the API. Every
reading on :class:`Device` is optional: the API omits fields a device does
not report, and an absent value must stay distinguishable from a reading of
zero. See https://api.smart-me.com/swagger/ for the upstream definitions.
"""

import enum
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class MeterEnergyType(enum.IntEnum):
    """Kind of energy a device meters."""

    UNKNOWN = 0
    ELECTRICITY = 1
    WATER = 2
    GAS = 3
    HEAT = 4
    HCA = 5
    ALL_METERS = 6
    TEMPERATURE = 7
    MBUS_GATEWAY = 8
    RS485_GATEWAY = 9
    CUSTOM_DEVICE = 10
    COMPRESSED_AIR = 11
    SOLAR_LOG = 12
    VIRTUAL_METER = 13
    WMBUS_GATEWAY = 14


class MeterSubType(enum.IntEnum):
    UNKNOWN = 0
    COLD_WATER = 1
    HOT_WATER = 2
    CHARGING_STATION = 3
    ELECTRICITY = 4
    WATER = 5
    GAS = 6
    ELECTRICITY_HEAT = 7
    TEMPERATURE = 8
    VIRTUAL_BATTERY = 9


class MeterFamilyType(enum.IntEnum):
    """Hardware family of a device (module, meter generation, gateway)."""

    UNKNOWN = 0
    CONNECT_PLUGIN_POWER_METER = 1
    METER_1_PHASE_DIN_RAIL = 2
    METER_1_PHASE_DIN_RAIL_WITH_SWITCH = 3
    MBUS_GATEWAY_V1 = 4
    RS485_GATEWAY_V1 = 5
    KAMSTRUP_MODULE = 6
    METER_3_PHASE_80A = 7
    METER_3_PHASE_32A_WITH_SWITCH = 8
    METER_3_PHASE_TRANSFORMER = 9
    LANDIS_GYR_MODULE = 10
    OPTICAL_MODULE_FNN = 11
    METER_3_PHASE_80A_WIFI_V2 = 12
    METER_3_PHASE_80A_MOBILE = 14
    METER_1_PHASE_80A_WIFI_V2 = 16
    METER_1_PHASE_32A_WIFI_V2 = 17
    METER_1_PHASE_80A_GPRS = 18
    METER_1_PHASE_32A_GPRS = 19
    WIRELESS_MBUS_GATEWAY_V1 = 20
    METER_3_PHASE_TRANSFORMER_MOBILE = 21
    METER_3_PHASE_NIMBUS = 65
    MITHRAL_CHARGING_STATION_V1 = 70
    REST_API_METER = 1001
    VIRTUAL_BILLING_METER = 1002


class ChargeStationState(enum.IntEnum):
    BOOTING = 0
    READY_NO_CAR_CONNECTED = 1
    READY_CAR_CONNECTED = 2
    STARTED_WAIT_FOR_CAR = 3
    CHARGING = 4
    INSTALLATION = 5
    AUTHORIZE = 6
    OFFLINE = 7


def _enum_field(alias: str):
    # Known codes become enum members; codes added upstream stay plain ints.
    return Field(None, alias=alias, union_mode="left_to_right")


class ApiModel(BaseModel):
    """Base for API documents.

    An exact alias or field name wins; any other key is matched to a field
    ignoring case, so ``ActivePower`` fills ``activePower``.
    """

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _match_keys_ignoring_case(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        folded: dict[str, str] = {}
        for name, field in cls.model_fields.items():
            key = field.alias or name
            folded.setdefault(key.lower(), key)
            folded.setdefault(name.lower(), name)
        exact = set(folded.values())

        matched = {key: value for key, value in data.items() if key in exact}
        for key, value in data.items():
            if key in exact or not isinstance(key, str):
                continue
            target = folded.get(key.lower())
            if target is None:
                matched.setdefault(key, value)
            elif target not in matched:
                matched[target] = value
        return matched


class Device(ApiModel):
    """A smart-me device and its most recent readings.

    Field names are snake_case; the camelCase API keys are accepted and
    produced through aliases.
    """

    # Identification
    id: str | None = None
    name: str | None = None
    serial: int | None = None
    device_energy_type: MeterEnergyType | int | None = _enum_field("deviceEnergyType")
    meter_sub_type: MeterSubType | int | None = _enum_field("meterSubType")
    family_type: MeterFamilyType | int | None = _enum_field("familyType")

    # Power
    active_power: float | None = Field(None, alias="activePower")
    active_power_l1: float | None = Field(None, alias="activePowerL1")
    active_power_l2: float | None = Field(None, alias="activePowerL2")
    active_power_l3: float | None = Field(None, alias="activePowerL3")
    active_power_unit: str | None = Field(None, alias="activePowerUnit")

    # Counters
    counter_reading: float | None = Field(None, alias="counterReading")
    counter_reading_unit: str | None = Field(None, alias="counterReadingUnit")
    counter_reading_t1: float | None = Field(None, alias="counterReadingT1")
    counter_reading_t2: float | None = Field(None, alias="counterReadingT2")
    counter_reading_t3: float | None = Field(None, alias="counterReadingT3")
    counter_reading_t4: float | None = Field(None, alias="counterReadingT4")
    counter_reading_import: float | None = Field(None, alias="counterReadingImport")
    counter_reading_export: float | None = Field(None, alias="counterReadingExport")

    # Switches (the API spells the per-phase keys "L10n", "L20n", "L30n")
    switch_on: bool | None = Field(None, alias="switchOn")
    switch_phase_l1_on: bool | None = Field(None, alias="switchPhaseL10n")
    switch_phase_l2_on: bool | None = Field(None, alias="switchPhaseL20n")
    switch_phase_l3_on: bool | None = Field(None, alias="switchPhaseL30n")

    # Voltage, current and power factor
    voltage: float | None = None
    voltage_l1: float | None = Field(None, alias="voltageL1")
    voltage_l2: float | None = Field(None, alias="voltageL2")
    voltage_l3: float | None = Field(None, alias="voltageL3")
    current: float | None = None
    current_l1: float | None = Field(None, alias="currentL1")
    current_l2: float | None = Field(None, alias="currentL2")
    current_l3: float | None = Field(None, alias="currentL3")
    power_factor: float | None = Field(None, alias="powerFactor")
    power_factor_l1: float | None = Field(None, alias="powerFactorL1")
    power_factor_l2: float | None = Field(None, alias="powerFactorL2")
    power_factor_l3: float | None = Field(None, alias="powerFactorL3")

    temperature: float | None = None
    active_tariff: int | None = Field(None, alias="activeTariff")

    # I/O
    digital_output1: bool | None = Field(None, alias="digitalOutput1")
    digital_output2: bool | None = Field(None, alias="digitalOutput2")
    analog_output1: int | None = Field(None, alias="analogOutput1")
    analog_output2: int | None = Field(None, alias="analogOutput2")
    digital_input1: bool | None = Field(None, alias="digitalInput1")
    digital_input2: bool | None = Field(None, alias="digitalInput2")

    # Passed through verbatim, the API does not use a fixed date format here.
    value_date: str | None = Field(None, alias="valueDate")
    additional_meter_serial_number: str | None = Field(
        None, alias="additionalMeterSerialNumber"
    )
    flow_rate: float | None = Field(None, alias="flowRate")
    charge_station_state: ChargeStationState | int | None = _enum_field(
        "chargeStationState"
    )

    def to_json(self) -> str:
        """Serialize to the API's JSON shape, omitting absent fields."""
        return self.model_dump_json(by_alias=True, exclude_none=True)


class ObisValue(ApiModel):
    """A single measurement identified by its OBIS code."""

    obis: str | None = None
    value: float | None = None


class DeviceValues(ApiModel):
    """Measurements of one device at one instant (``/api/Values/{id}``).

    ``values`` keeps the order returned by the API. Keys the API leaves out
    decode as None rather than failing.
    """

    device_id: str | None = Field(None, alias="deviceId")
    date: datetime | None = None
    values: list[ObisValue] = Field(default_factory=list)

    def value_for(self, obis: str) -> float | None:
        """Return the value of the first measurement with the given OBIS code."""
        for item in self.values:
            if item.obis == obis:
                return item.value
        return None


class Value(ApiModel):
    """A historical value at a point in time (``/api/ValuesInPast*``)."""

    date: datetime | None = None
    value: float | None = None
