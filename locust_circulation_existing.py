"""Circulation workload against borrowers and items already in Koha.

Patrons and items are loaded once from the REST API. Every iteration logs in,
checks a random item in, out to a random patron, and back in, then searches
the OPAC. Nothing is created or deleted, so this variant suits catalogues
seeded with real data.

    locust -f locust_circulation_existing.py --config koha.conf
"""

import logging
import threading

from locust import between, events, task
from locust_plugins.users.playwright import PageWithRetry, PlaywrightUser, pw

import koha_settings
from koha_checks import CheckRecorder
from koha_data import load_words
from koha_locust import koha_api
from koha_workflow import CirculationWorkflow

logger = logging.getLogger(__name__)

WORDS = load_words(koha_settings.WORDS_FILE)

EXISTING = {"loaded": False, "patrons": [], "items": []}
EXISTING_LOCK = threading.Lock()


def load_existing_data(api):
    if EXISTING["loaded"]:
        return EXISTING
    with EXISTING_LOCK:
        if EXISTING["loaded"]:
            return EXISTING
        patrons = [p for p in api.list_patrons(koha_settings.PER_PAGE) if p.get("cardnumber")]
        items = [i for i in api.list_items(koha_settings.PER_PAGE) if i.get("external_id")]
        if not patrons or not items:
            raise RuntimeError(f"Need patrons and barcoded items, got {len(patrons)} and {len(items)}")
        EXISTING["patrons"] = patrons
        EXISTING["items"] = items
        EXISTING["loaded"] = True
        logger.info("Loaded %d borrowers and %d items", len(patrons), len(items))
    return EXISTING


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    load_existing_data(koha_api(environment))


class ExistingCirculationUser(PlaywrightUser):
    """Staff member working the circulation desk with real borrowers."""

    host = koha_settings.STAFF_URL
    headless = True
    wait_time = between(koha_settings.WAIT_MIN, koha_settings.WAIT_MAX)

    def on_start(self):
        self.checks = CheckRecorder(self.environment.events.request)
        self.api = koha_api(self.environment, self, self.checks)
        self.workflow = CirculationWorkflow(self.api, self.checks, WORDS)

    @task
    @pw
    async def circulate_existing_item(self, page: PageWithRetry):
        data = load_existing_data(self.api)
        await self.workflow.run_existing(page, data["patrons"], data["items"])
