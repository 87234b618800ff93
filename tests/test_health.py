import threading

from health import HealthState, OK, UNAVAILABLE

def test_starts_healthy_and_ready():
    state = HealthState()
    assert state.healthz_status() == OK
    assert state.readiness_status() == OK

def test_toggle_flips_between_ok_and_unavailable():
    state = HealthState()
    assert state.toggle_healthz() == UNAVAILABLE
    assert state.toggle_healthz() == OK
    assert state.toggle_readiness() == UNAVAILABLE
    assert state.healthz_status() == OK

def test_toggle_leaves_other_codes_alone():
    state = HealthState()
    state.set_healthz_status(500)
    assert state.toggle_healthz() == 500

def test_shutdown_marks_everything_unavailable():
    state = HealthState()
    state.shutdown()
    assert state.healthz_status() == UNAVAILABLE
    assert state.readiness_status() == UNAVAILABLE

def test_concurrent_toggles():
    state = HealthState()
    threads = [threading.Thread(target=state.toggle_readiness) for _ in range(50)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    # an even number of flips ends where it started
    assert state.readiness_status() == OK
