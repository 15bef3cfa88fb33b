"""
차량 시뮬레이터 — 전기차 한 대의 물리/전기 상태와 고장 모드를 모델링한다.

advance()를 호출할 때마다 이전 스냅샷(없으면 무작위 초기 조건)과 새 난수로
다음 텔레메트리 스냅샷을 만든다. I/O 없음, 실패 경로 없음.
같은 인스턴스에 대한 advance() 동시 호출은 호출자가 직렬화해야 한다.
"""

import logging
import random

from evfleet.simulator.failure_modes import FailureModeState, FailureRates, event_happens
from evfleet.simulator.snapshot import Snapshot

logger = logging.getLogger(__name__)

# 일반적인 EV 상한 속도 (140km/h = 38.889m/s)
MAX_SPEED = 38.889

# 관성은 단순화를 위해 고정값, 선형 스무딩
COOLANT_INERTIA = 0.8
VEHICLE_INERTIA = 0.8

AIR_SPEED_MULTIPLIER = 4.0
VIBRATION_AMPLITUDE_MULTIPLIER = 100.0
DRIVE_SHAFT_VIBRATION_FACTOR = 1.5

# 배터리 전압은 대략 200~260V
DISCHARGED_BATTERY_VOLTAGE = 180.0
FULLY_CHARGED_BATTERY_VOLTAGE = 260.0

MIN_CURRENT_DRAW = 80.0
COOLANT_HEAT_FACTOR = 0.5
OVERHEATING_HEAT_FACTOR = 2.5
MIN_COOLANT_TEMP = 60.0

FIRMWARE_OUTDATED = 1000
FIRMWARE_CURRENT = 2000

# 가속도계 범위: (bump 여부, 쇼크 고장 여부) → (하한, 상한)
ACCELEROMETER_RANGES = {
    (False, False): (0.0, 1.0),
    (False, True): (3.0, 4.0),
    (True, False): (2.0, 3.0),
    (True, True): (5.0, 7.0),
}


class VehicleSimulator:
    """전기차 한 대의 텔레메트리 시뮬레이터"""

    def __init__(self, vehicle_id: int, rng: random.Random | None = None,
                 rates: FailureRates | None = None):
        self._vehicle_id = vehicle_id
        self._rng = rng or random.Random()
        self.rates = rates or FailureRates()
        self.failures = FailureModeState()
        self.previous: Snapshot | None = None

    @property
    def vehicle_id(self) -> int:
        return self._vehicle_id

    def _tire_pressure(self, pressure_lost: bool) -> int:
        if pressure_lost:
            return self._rng.randrange(20, 25)
        return self._rng.randrange(30, 35)

    def _shock_acceleration(self, shock_failed: bool, bump_happens: bool) -> float:
        low, high = ACCELEROMETER_RANGES[(bump_happens, shock_failed)]
        return self._rng.uniform(low, high)

    def advance(self) -> Snapshot:
        """다음 텔레메트리 스냅샷을 생성하고 내부 상태를 갱신한다."""
        rng = self._rng
        prev = self.previous

        if prev is None:
            # 주행 중 임의 시점부터 시계열이 시작된다고 가정
            previous_speed = rng.uniform(0, 50)
            # 대부분의 값이 스로틀에 의존하므로 먼저 뽑는다
            throttle_pos = rng.uniform(0, 1)
            intake_air_temp = rng.uniform(15, 40)
            battery_percentage = rng.uniform(30, 100)
            battery_voltage = DISCHARGED_BATTERY_VOLTAGE + battery_percentage * (
                FULLY_CHARGED_BATTERY_VOLTAGE - DISCHARGED_BATTERY_VOLTAGE
            )
            # 직진 주행 가정
            intake_air_flow_speed = previous_speed * AIR_SPEED_MULTIPLIER
            previous_coolant_temp = rng.uniform(intake_air_temp, intake_air_temp + 20)
            logger.debug(f"차량 {self._vehicle_id} 초기 조건 생성 (speed={previous_speed:.2f})")
        else:
            previous_speed = prev.speed
            throttle_pos = max(0.0, min(prev.throttle_pos + (0.5 - rng.uniform(0, 1)), 1.0))
            intake_air_temp = prev.intake_air_temp
            battery_percentage = prev.battery_percentage - previous_speed * 0.001
            battery_voltage = prev.battery_voltage
            intake_air_flow_speed = prev.intake_air_flow_speed
            # 상한/하한 순서가 뒤집혀 있어 결과는 항상 intake_air_temp (원 모델 그대로 유지)
            previous_coolant_temp = min(
                max(prev.coolant_temp + previous_speed * 0.008 - intake_air_temp * 0.1, MIN_COOLANT_TEMP),
                intake_air_temp,
            )

        # 고장 모드 갱신 — 한 번 발생하면 계속 유지
        before = set(self.failures.active_names())
        self.failures.update(rng, self.rates)
        newly_active = [n for n in self.failures.active_names() if n not in before]
        if newly_active:
            logger.debug(f"차량 {self._vehicle_id} 고장 발생: {', '.join(newly_active)}")

        failures = self.failures

        # 스로틀이 전류로 거의 그대로 이어진다 (배터리 전압과도 관련)
        current_draw = max(
            throttle_pos * (abs(FULLY_CHARGED_BATTERY_VOLTAGE - battery_voltage) + 4),
            MIN_CURRENT_DRAW,
        )

        heat_factor = OVERHEATING_HEAT_FACTOR if failures.overheating_coolant else COOLANT_HEAT_FACTOR
        coolant_temp = (
            COOLANT_INERTIA * previous_coolant_temp
            + (1 - COOLANT_INERTIA) * (previous_coolant_temp + current_draw * heat_factor)
        )

        # 회생제동 포함, 가감속은 즉시 반영
        speed = VEHICLE_INERTIA * previous_speed + (1 - VEHICLE_INERTIA) * (throttle_pos * MAX_SPEED)

        engine_vibration_amplitude = speed * VIBRATION_AMPLITUDE_MULTIPLIER
        if failures.drive_shaft_degradation:
            engine_vibration_amplitude *= DRIVE_SHAFT_VIBRATION_FACTOR

        tire_pressures = [self._tire_pressure(lost) for lost in failures.tire_pressure_loss]

        bump_happens = event_happens(rng, self.rates.bump)
        accelerometers = [
            self._shock_acceleration(failed, bump_happens) for failed in failures.shock_failures
        ]

        firmware = FIRMWARE_OUTDATED if failures.outdated_firmware else FIRMWARE_CURRENT

        snapshot = Snapshot(
            vehicle_id=self._vehicle_id,
            coolant_temp=coolant_temp,
            intake_air_temp=intake_air_temp,
            intake_air_flow_speed=intake_air_flow_speed,
            battery_percentage=battery_percentage,
            battery_voltage=battery_voltage,
            current_draw=current_draw,
            speed=speed,
            engine_vibration_amplitude=engine_vibration_amplitude,
            throttle_pos=throttle_pos,
            tire_pressure_11=tire_pressures[0],
            tire_pressure_12=tire_pressures[1],
            tire_pressure_21=tire_pressures[2],
            tire_pressure_22=tire_pressures[3],
            accelerometer_11=accelerometers[0],
            accelerometer_12=accelerometers[1],
            accelerometer_21=accelerometers[2],
            accelerometer_22=accelerometers[3],
            control_unit_firmware=firmware,
            failure_occurred=failures.any_active,
        )
        self.previous = snapshot
        return snapshot
