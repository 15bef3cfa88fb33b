"""
VehicleSimulator Tests - 초기/정상 상태 분기, 고장 래치, 파생 물리량
"""
import random

import pytest

from evfleet.simulator.failure_modes import FailureRates
from evfleet.simulator.vehicle_simulator import MAX_SPEED, VehicleSimulator

NO_FAILURES = FailureRates(
    tire_pressure_loss=0,
    shock_failure=0,
    drive_shaft_degradation=0,
    coolant_overheating=0,
    outdated_firmware=0,
    bump=0,
)


def test_first_advance_ranges():
    """첫 호출 값은 초기 샘플링 구간 안에 있어야 한다."""
    for seed in range(200):
        sim = VehicleSimulator(seed, rng=random.Random(seed))
        snap = sim.advance()

        assert 30 <= snap.battery_percentage <= 100
        assert 0 <= snap.throttle_pos <= 1
        assert 0 <= snap.speed <= 50
        assert 15 <= snap.intake_air_temp <= 40
        assert snap.vehicle_id == seed


def test_previous_snapshot_is_stored():
    sim = VehicleSimulator(1, rng=random.Random(1))
    assert sim.previous is None

    first = sim.advance()
    assert sim.previous is first

    second = sim.advance()
    assert sim.previous is second
    assert second is not first


def test_failure_occurred_never_resets():
    """한 번 true가 된 failure_occurred는 다시 false가 되지 않는다."""
    rates = FailureRates(
        tire_pressure_loss=1,
        shock_failure=1,
        drive_shaft_degradation=1,
        coolant_overheating=1,
        outdated_firmware=1,
    )
    sim = VehicleSimulator(3, rng=random.Random(99), rates=rates)

    seen_failure = False
    for _ in range(500):
        snap = sim.advance()
        if seen_failure:
            assert snap.failure_occurred
        seen_failure = seen_failure or snap.failure_occurred
        assert snap.failure_occurred == sim.failures.any_active

    assert seen_failure


def test_no_failure_means_all_latches_clear():
    sim = VehicleSimulator(4, rng=random.Random(4), rates=NO_FAILURES)

    for _ in range(100):
        snap = sim.advance()
        assert snap.failure_occurred is False
        assert sim.failures.active_names() == []


def test_tire_pressure_keyed_by_latch():
    rates = FailureRates(tire_pressure_loss=2)
    sim = VehicleSimulator(5, rng=random.Random(5), rates=rates)

    for _ in range(300):
        snap = sim.advance()
        for pressure, lost in zip(snap.tire_pressures, sim.failures.tire_pressure_loss):
            assert isinstance(pressure, int)
            if lost:
                assert 20 <= pressure <= 25
            else:
                assert 30 <= pressure <= 35


def test_throttle_clamped_for_1000_calls():
    sim = VehicleSimulator(6, rng=random.Random(6))

    for _ in range(1000):
        snap = sim.advance()
        assert 0.0 <= snap.throttle_pos <= 1.0


def test_certain_rates_latch_after_one_call():
    """확률 100%인 쇼크/드라이브샤프트 고장은 첫 호출에 바로 걸린다."""
    sim = VehicleSimulator(8, rng=random.Random(8))
    sim.advance()

    assert all(sim.failures.shock_failures)
    assert sim.failures.drive_shaft_degradation


def test_zero_rates_never_latch():
    sim = VehicleSimulator(9, rng=random.Random(9), rates=NO_FAILURES)

    for _ in range(10_000):
        sim.advance()

    assert sim.failures.active_names() == []


def test_outdated_firmware_rate_is_effectively_certain():
    for seed in range(50):
        snap = VehicleSimulator(seed, rng=random.Random(seed)).advance()
        assert snap.control_unit_firmware == 1000


def test_current_firmware_without_latch():
    snap = VehicleSimulator(10, rng=random.Random(10), rates=NO_FAILURES).advance()
    assert snap.control_unit_firmware == 2000


def test_golden_values_with_minimum_draws(min_rng):
    """모든 난수를 최솟값으로 고정했을 때의 회귀 값"""
    sim = VehicleSimulator(7, rng=min_rng)
    snap = sim.advance()

    assert snap.vehicle_id == 7
    assert snap.speed == 0
    assert snap.throttle_pos == 0
    assert snap.intake_air_temp == 15
    assert snap.battery_percentage == 30
    # 180 + 30 × (260 − 180)
    assert snap.battery_voltage == pytest.approx(2580)
    assert snap.intake_air_flow_speed == 0
    assert snap.current_draw == pytest.approx(80)
    # 0.8 × 15 + 0.2 × (15 + 80 × 2.5) — 과열 래치가 걸린 상태
    assert snap.coolant_temp == pytest.approx(55)
    assert snap.engine_vibration_amplitude == 0
    assert snap.tire_pressures == (20, 20, 20, 20)
    # bump + 쇼크 고장 → 5~7 구간의 하한
    assert snap.accelerometers == (5, 5, 5, 5)
    assert snap.control_unit_firmware == 1000
    assert snap.failure_occurred is True


def test_golden_values_second_step(min_rng):
    sim = VehicleSimulator(7, rng=min_rng)
    sim.advance()
    snap = sim.advance()

    # 0 + (0.5 − 0)
    assert snap.throttle_pos == pytest.approx(0.5)
    assert snap.battery_percentage == pytest.approx(30)
    assert snap.battery_voltage == pytest.approx(2580)
    # 0.5 × (|260 − 2580| + 4)
    assert snap.current_draw == pytest.approx(1162)
    # 이전 냉각수 온도는 min(max(.., 60), 15) = 15 로 고정
    assert snap.coolant_temp == pytest.approx(0.8 * 15 + 0.2 * (15 + 1162 * 2.5))
    assert snap.speed == pytest.approx(0.2 * 0.5 * MAX_SPEED)
    assert snap.engine_vibration_amplitude == pytest.approx(snap.speed * 150)


def test_steady_state_carries_values_forward():
    sim = VehicleSimulator(11, rng=random.Random(11))
    first = sim.advance()
    second = sim.advance()

    assert second.intake_air_temp == first.intake_air_temp
    assert second.battery_voltage == first.battery_voltage
    assert second.intake_air_flow_speed == first.intake_air_flow_speed
    assert second.battery_percentage == pytest.approx(first.battery_percentage - first.speed * 0.001)


def test_steady_state_coolant_clamp_resolves_to_intake_air_temp():
    """intake_air_temp(<60)가 상한으로 작동해 이전 냉각수 온도는 항상 intake_air_temp가 된다."""
    sim = VehicleSimulator(12, rng=random.Random(12), rates=NO_FAILURES)
    first = sim.advance()
    second = sim.advance()

    expected = 0.8 * first.intake_air_temp + 0.2 * (first.intake_air_temp + second.current_draw * 0.5)
    assert second.coolant_temp == pytest.approx(expected)


def test_vibration_without_drive_shaft_failure():
    sim = VehicleSimulator(13, rng=random.Random(13), rates=NO_FAILURES)

    for _ in range(20):
        snap = sim.advance()
        assert snap.engine_vibration_amplitude == pytest.approx(snap.speed * 100)


def test_accelerometer_ranges_follow_shock_state():
    sim = VehicleSimulator(14, rng=random.Random(14), rates=FailureRates(shock_failure=3, bump=30))

    for _ in range(300):
        snap = sim.advance()
        for value, failed in zip(snap.accelerometers, sim.failures.shock_failures):
            if failed:
                assert 3 <= value <= 4 or 5 <= value <= 7
            else:
                assert 0 <= value <= 1 or 2 <= value <= 3


def test_accelerometers_quiet_without_bumps_or_failures():
    sim = VehicleSimulator(15, rng=random.Random(15), rates=NO_FAILURES)

    for _ in range(100):
        snap = sim.advance()
        assert all(0 <= value <= 1 for value in snap.accelerometers)


def test_current_draw_floor():
    sim = VehicleSimulator(16, rng=random.Random(16))

    for _ in range(200):
        assert sim.advance().current_draw >= 80


def test_snapshot_is_immutable():
    snap = VehicleSimulator(17, rng=random.Random(17)).advance()

    with pytest.raises(AttributeError):
        snap.speed = 1.0


def test_bump_is_shared_by_all_failed_shocks():
    """bump는 호출당 한 번만 뽑혀 네 가속도계가 함께 반응한다."""
    sim = VehicleSimulator(18, rng=random.Random(18), rates=FailureRates(bump=50))

    bumps = 0
    for _ in range(2000):
        snap = sim.advance()
        assert all(sim.failures.shock_failures)
        high = [value >= 5 for value in snap.accelerometers]
        assert all(high) or not any(high)
        bumps += all(high)

    # 양쪽 분기가 모두 나와야 의미 있는 검증
    assert 0 < bumps < 2000


def test_bump_is_shared_by_all_healthy_shocks():
    sim = VehicleSimulator(19, rng=random.Random(19), rates=FailureRates(shock_failure=0, bump=50))

    bumps = 0
    for _ in range(2000):
        snap = sim.advance()
        assert not any(sim.failures.shock_failures)
        if all(2 <= value <= 3 for value in snap.accelerometers):
            bumps += 1
        else:
            assert all(0 <= value <= 1 for value in snap.accelerometers)

    assert 0 < bumps < 2000
