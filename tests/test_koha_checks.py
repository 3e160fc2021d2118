from types import SimpleNamespace

from fakes import FakeEvent
from koha_checks import CHECK, CheckFailed, CheckRecorder, check_pass_rate, enforce_threshold


def _stats(*entries):
    return SimpleNamespace(entries={(e.name, e.method): e for e in entries})


def _entry(name, method, requests, failures):
    return SimpleNamespace(name=name, method=method, num_requests=requests, num_failures=failures)


def test_passing_check_fires_event_without_exception():
    event = FakeEvent()
    checks = CheckRecorder(event)
    assert checks.check("results are not empty", True) is True
    fired = event.fired[0]
    assert fired["request_type"] == CHECK
    assert fired["name"] == "results are not empty"
    assert fired["exception"] is None
    assert checks.passes == 1 and checks.failures == 0


def test_failing_check_carries_check_failed():
    event = FakeEvent()
    checks = CheckRecorder(event)
    assert checks.check("checked out item matches", False, "barcode missing") is False
    exception = event.fired[0]["exception"]
    assert isinstance(exception, CheckFailed)
    assert "barcode missing" in str(exception)
    assert checks.failures == 1


def test_pass_rate_only_counts_checks():
    stats = _stats(
        _entry("checkout user matches", CHECK, 10, 1),
        _entry("logged in username matches", CHECK, 10, 0),
        _entry("POST /api/v1/patrons", "POST", 50, 50),
    )
    assert check_pass_rate(stats) == 19 / 20


def test_pass_rate_without_checks_is_perfect():
    assert check_pass_rate(_stats(_entry("GET /", "GET", 3, 3))) == 1.0


def test_threshold_sets_exit_code():
    env = SimpleNamespace(stats=_stats(_entry("c", CHECK, 4, 1)), process_exit_code=None)
    enforce_threshold(env, 1.0)
    assert env.process_exit_code == 1


def test_threshold_met_leaves_exit_code():
    env = SimpleNamespace(stats=_stats(_entry("c", CHECK, 4, 1)), process_exit_code=None)
    assert enforce_threshold(env, 0.7) == 0.75
    assert env.process_exit_code is None
