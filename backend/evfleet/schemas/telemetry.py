"""
텔레메트리 전송용 Pydantic 스키마
- 필드 alias는 기존 수신측 JSON 키(camelCase)를 그대로 따른다.
"""

from pydantic import BaseModel, ConfigDict, Field

from evfleet.simulator.snapshot import Snapshot


class TelemetryMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    vehicle_id: int = Field(alias="id")
    coolant_temp: float = Field(alias="coolantTemp")
    intake_air_temp: float = Field(alias="intakeAirTemp")
    intake_air_flow_speed: float = Field(alias="intakeAirFlowSpeed")
    battery_percentage: float = Field(alias="batteryPercentage")
    battery_voltage: float = Field(alias="batteryVoltage")
    current_draw: float = Field(alias="currentDraw")
    speed: float
    engine_vibration_amplitude: float = Field(alias="engineVibrationAmplitude")
    throttle_pos: float = Field(alias="throttlePos")
    tire_pressure_11: int = Field(alias="tirePressure11")
    tire_pressure_12: int = Field(alias="tirePressure12")
    tire_pressure_21: int = Field(alias="tirePressure21")
    tire_pressure_22: int = Field(alias="tirePressure22")
    accelerometer_11: float = Field(alias="accelerometer11Value")
    accelerometer_12: float = Field(alias="accelerometer12Value")
    accelerometer_21: float = Field(alias="accelerometer21Value")
    accelerometer_22: float = Field(alias="accelerometer22Value")
    control_unit_firmware: int = Field(alias="controlUnitFirmware")
    failure_occurred: bool = Field(alias="failureOccurred")

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> "TelemetryMessage":
        return cls(
            vehicle_id=snapshot.vehicle_id,
            coolant_temp=snapshot.coolant_temp,
            intake_air_temp=snapshot.intake_air_temp,
            intake_air_flow_speed=snapshot.intake_air_flow_speed,
            battery_percentage=snapshot.battery_percentage,
            battery_voltage=snapshot.battery_voltage,
            current_draw=snapshot.current_draw,
            speed=snapshot.speed,
            engine_vibration_amplitude=snapshot.engine_vibration_amplitude,
            throttle_pos=snapshot.throttle_pos,
            tire_pressure_11=snapshot.tire_pressure_11,
            tire_pressure_12=snapshot.tire_pressure_12,
            tire_pressure_21=snapshot.tire_pressure_21,
            tire_pressure_22=snapshot.tire_pressure_22,
            accelerometer_11=snapshot.accelerometer_11,
            accelerometer_12=snapshot.accelerometer_12,
            accelerometer_21=snapshot.accelerometer_21,
            accelerometer_22=snapshot.accelerometer_22,
            control_unit_firmware=snapshot.control_unit_firmware,
            failure_occurred=snapshot.failure_occurred,
        )

    def to_wire(self) -> dict:
        """전송용 dict (camelCase 키)"""
        return self.model_dump(by_alias=True)
