"""
Snapshot — advance() 한 번에 하나씩 생성되는 불변 텔레메트리 레코드.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Snapshot:
    vehicle_id: int

    coolant_temp: float
    intake_air_temp: float
    intake_air_flow_speed: float

    # 배터리
    battery_percentage: float
    battery_voltage: float
    current_draw: float

    speed: float
    engine_vibration_amplitude: float
    throttle_pos: float  # 0.0~1.0

    # 타이어 공기압 (앞왼쪽 11, 앞오른쪽 12, 뒤왼쪽 21, 뒤오른쪽 22)
    tire_pressure_11: int
    tire_pressure_12: int
    tire_pressure_21: int
    tire_pressure_22: int

    # 쇼크업소버 가속도계
    accelerometer_11: float
    accelerometer_12: float
    accelerometer_21: float
    accelerometer_22: float

    control_unit_firmware: int  # 1000 (구버전) / 2000
    failure_occurred: bool

    @property
    def tire_pressures(self) -> tuple[int, int, int, int]:
        return (self.tire_pressure_11, self.tire_pressure_12,
                self.tire_pressure_21, self.tire_pressure_22)

    @property
    def accelerometers(self) -> tuple[float, float, float, float]:
        return (self.accelerometer_11, self.accelerometer_12,
                self.accelerometer_21, self.accelerometer_22)
