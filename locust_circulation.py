"""Browser-driven circulation workload for Koha.

Each iteration logs into the staff interface. It creates a stub patron,
biblio and item through the REST API, then checks the item in, out and in
again. It searches the OPAC for a random word and deletes the stub data.

Run via:
    ./run_circulation_tests.sh circulation
Or manually (run shape lives in koha.conf):
    locust -f locust_circulation.py --config koha.conf \
        --csv=results/circulation/raw/5_users --csv-full-history
"""

from locust import between, events, task
from locust_plugins.users.playwright import PageWithRetry, PlaywrightUser, pw

import koha_settings
from koha_checks import CheckRecorder
from koha_data import load_words
from koha_locust import REFERENCE, koha_api, load_reference
from koha_workflow import CirculationWorkflow

WORDS = load_words(koha_settings.WORDS_FILE)

events.test_start.add_listener(load_reference)


class CirculationUser(PlaywrightUser):
    """Staff member who circulates freshly created items."""

    host = koha_settings.STAFF_URL
    headless = True
    wait_time = between(koha_settings.WAIT_MIN, koha_settings.WAIT_MAX)

    def on_start(self):
        self.checks = CheckRecorder(self.environment.events.request)
        self.api = koha_api(self.environment, self, self.checks)
        self.reference = REFERENCE.get(self.api, koha_settings.PER_PAGE)
        self.workflow = CirculationWorkflow(self.api, self.checks, WORDS)

    @task
    @pw
    async def circulate_stub_item(self, page: PageWithRetry):
        await self.workflow.run_created(page, self.reference)
