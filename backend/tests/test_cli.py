"""
CLI Tests - 인자 파싱, 실행 루프
"""
import pytest

from evfleet.cli import build_manager, main, parse_args, run


def test_defaults_follow_settings():
    args = parse_args([])
    assert args.vehicles == 1
    assert args.iterations == 0
    assert args.channel_mode == "vehicle"
    assert args.no_redis is False


def test_rejects_non_positive_vehicle_count():
    with pytest.raises(SystemExit):
        parse_args(["--vehicles", "0"])


def test_rejects_negative_iterations():
    with pytest.raises(SystemExit):
        parse_args(["--iterations", "-1"])


def test_run_stops_after_iterations():
    args = parse_args(["--no-redis", "--vehicles", "2", "--iterations", "4", "--interval", "0", "--seed", "1"])
    manager = build_manager(args)

    run(manager, args.interval)

    assert manager.iterations == 4
    assert manager.event_bus.get_all_streams() == {"car0": 4, "car1": 4}


def test_fleet_channel_mode():
    args = parse_args(["--no-redis", "--vehicles", "3", "--iterations", "1",
                       "--interval", "0", "--channel-mode", "fleet"])
    manager = build_manager(args)

    run(manager, args.interval)

    assert manager.event_bus.get_all_streams() == {"fleet.telemetry": 3}


def test_main_exit_code():
    assert main(["--no-redis", "--iterations", "2", "--interval", "0"]) == 0
