"""
고장 모드 상태 — 차량 한 대가 소유하는 11개의 영구 래치.

한 번 true가 된 래치는 시뮬레이터가 살아있는 동안 다시 false로 돌아가지 않는다.
발생 확률은 퍼센트 단위 임계값으로, 0~100 균등 난수보다 크면 발생한 것으로 본다.
"""

import random
from dataclasses import dataclass


def event_happens(rng: random.Random, percentage: float) -> bool:
    """percentage(%) 확률로 이벤트가 발생하는지 판정"""
    return percentage > rng.uniform(0, 100)


@dataclass(frozen=True)
class FailureRates:
    """고장 모드별 발생 확률 (%)"""
    tire_pressure_loss: float = 50.0
    shock_failure: float = 100.0
    drive_shaft_degradation: float = 100.0
    coolant_overheating: float = 20.0
    # 100 초과 — 사실상 항상 발생
    outdated_firmware: float = 400.0
    # 노면 충격 (래치 아님, 매 호출마다 새로 판정)
    bump: float = 5.0


@dataclass
class FailureModeState:
    """고장 모드 래치 묶음"""
    pressure_loss_tire_1: bool = False
    pressure_loss_tire_2: bool = False
    pressure_loss_tire_3: bool = False
    pressure_loss_tire_4: bool = False

    shock_failure_1: bool = False
    shock_failure_2: bool = False
    shock_failure_3: bool = False
    shock_failure_4: bool = False

    drive_shaft_degradation: bool = False
    overheating_coolant: bool = False
    outdated_firmware: bool = False

    @property
    def tire_pressure_loss(self) -> tuple[bool, bool, bool, bool]:
        return (
            self.pressure_loss_tire_1,
            self.pressure_loss_tire_2,
            self.pressure_loss_tire_3,
            self.pressure_loss_tire_4,
        )

    @property
    def shock_failures(self) -> tuple[bool, bool, bool, bool]:
        return (
            self.shock_failure_1,
            self.shock_failure_2,
            self.shock_failure_3,
            self.shock_failure_4,
        )

    @property
    def any_active(self) -> bool:
        """하나라도 고장이 발생했는지 (failure_occurred 라벨)"""
        return (
            any(self.tire_pressure_loss)
            or any(self.shock_failures)
            or self.drive_shaft_degradation
            or self.overheating_coolant
            or self.outdated_firmware
        )

    def active_names(self) -> list[str]:
        """활성화된 래치 이름 목록"""
        return [name for name, value in vars(self).items() if value]

    def update(self, rng: random.Random, rates: FailureRates):
        """
        래치마다 독립적으로 발생 여부를 판정해 OR 한다.
        이미 걸린 래치는 다시 뽑지 않는다 (short-circuit).
        """
        self.pressure_loss_tire_1 = self.pressure_loss_tire_1 or event_happens(rng, rates.tire_pressure_loss)
        self.pressure_loss_tire_2 = self.pressure_loss_tire_2 or event_happens(rng, rates.tire_pressure_loss)
        self.pressure_loss_tire_3 = self.pressure_loss_tire_3 or event_happens(rng, rates.tire_pressure_loss)
        self.pressure_loss_tire_4 = self.pressure_loss_tire_4 or event_happens(rng, rates.tire_pressure_loss)

        self.shock_failure_1 = self.shock_failure_1 or event_happens(rng, rates.shock_failure)
        self.shock_failure_2 = self.shock_failure_2 or event_happens(rng, rates.shock_failure)
        self.shock_failure_3 = self.shock_failure_3 or event_happens(rng, rates.shock_failure)
        self.shock_failure_4 = self.shock_failure_4 or event_happens(rng, rates.shock_failure)

        self.drive_shaft_degradation = (
            self.drive_shaft_degradation or event_happens(rng, rates.drive_shaft_degradation)
        )
        self.overheating_coolant = self.overheating_coolant or event_happens(rng, rates.coolant_overheating)
        self.outdated_firmware = self.outdated_firmware or event_happens(rng, rates.outdated_firmware)
