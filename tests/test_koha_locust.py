import pytest
from locust.env import Environment

import koha_locust
import koha_settings
from fakes import FakeResponse, FakeSession
from koha_api import ReferenceData
from koha_checks import CHECK, CheckRecorder, check_pass_rate


@pytest.fixture
def env():
    environment = Environment(user_classes=[])
    environment.create_local_runner()
    return environment


def test_api_session_reports_into_environment(env):
    session = koha_locust.api_session(env)
    assert session.request_event is env.events.request
    assert session.base_url == koha_settings.API_ROOT


def test_checks_land_in_stats_and_fail_threshold(env, monkeypatch):
    monkeypatch.setattr(koha_settings, "CHECK_PASS_RATE", 1.0)
    checks = CheckRecorder(env.events.request)
    checks.check("logged in username matches", True)
    checks.check("checked out item matches", False, "barcode missing")

    koha_locust.apply_check_threshold(env)

    assert env.stats.get("checked out item matches", CHECK).num_failures == 1
    assert check_pass_rate(env.stats) == 0.5
    assert env.process_exit_code == 1


def test_passing_checks_leave_exit_code_alone(env, monkeypatch):
    monkeypatch.setattr(koha_settings, "CHECK_PASS_RATE", 1.0)
    CheckRecorder(env.events.request).check("results are not empty", True)
    koha_locust.apply_check_threshold(env)
    assert env.process_exit_code is None


def test_load_reference_caches_data(env, monkeypatch):
    per_page = koha_settings.PER_PAGE
    session = FakeSession({
        ("GET", f"/api/v1/patron_categories?_per_page={per_page}"): FakeResponse(200, [{"patron_category_id": "PT"}]),
        ("GET", f"/api/v1/libraries?_per_page={per_page}"): FakeResponse(200, [{"library_id": "CPL"}]),
        ("GET", f"/api/v1/item_types?_per_page={per_page}"): FakeResponse(200, [{"item_type_id": "BK"}]),
    })
    reference = ReferenceData()
    monkeypatch.setattr(koha_locust, "REFERENCE", reference)
    monkeypatch.setattr(koha_locust, "api_session", lambda environment, user=None: session)

    koha_locust.load_reference(env)
    koha_locust.load_reference(env)

    assert reference.data["libraries"] == [{"library_id": "CPL"}]
    assert len(session.calls) == 3
