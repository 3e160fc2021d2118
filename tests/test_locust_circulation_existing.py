import pytest

import koha_settings
import locust_circulation_existing
from fakes import FakeResponse, FakeSession
from koha_api import KohaApi

PATRONS_URL = f"/api/v1/patrons?_per_page={koha_settings.PER_PAGE}"
ITEMS_URL = f"/api/v1/items?_per_page={koha_settings.PER_PAGE}"


@pytest.fixture
def existing(monkeypatch):
    state = {"loaded": False, "patrons": [], "items": []}
    monkeypatch.setattr(locust_circulation_existing, "EXISTING", state)
    return state


def _api(patrons, items):
    session = FakeSession({
        ("GET", PATRONS_URL): FakeResponse(200, patrons),
        ("GET", ITEMS_URL): FakeResponse(200, items),
    })
    return KohaApi(session), session


def test_load_existing_data_keeps_only_usable_records(existing):
    api, _ = _api(
        [{"patron_id": 1, "cardnumber": "C1"}, {"patron_id": 2, "cardnumber": None},
         {"patron_id": 3, "cardnumber": ""}],
        [{"item_id": 9, "external_id": "B9"}, {"item_id": 10}],
    )

    data = locust_circulation_existing.load_existing_data(api)

    assert data is existing
    assert data["loaded"] is True
    assert data["patrons"] == [{"patron_id": 1, "cardnumber": "C1"}]
    assert data["items"] == [{"item_id": 9, "external_id": "B9"}]


def test_load_existing_data_only_fetches_once(existing):
    api, session = _api([{"patron_id": 1, "cardnumber": "C1"}],
                        [{"item_id": 9, "external_id": "B9"}])

    locust_circulation_existing.load_existing_data(api)
    calls = len(session.calls)
    locust_circulation_existing.load_existing_data(api)

    assert calls == 2
    assert len(session.calls) == calls


def test_load_existing_data_without_barcoded_items_raises(existing):
    api, _ = _api([{"patron_id": 1, "cardnumber": "C1"}], [{"item_id": 10, "external_id": None}])

    with pytest.raises(RuntimeError, match="got 1 and 0"):
        locust_circulation_existing.load_existing_data(api)
    assert existing["loaded"] is False
