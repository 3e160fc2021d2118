"""Anonymous OPAC search workload: patrons searching the public catalogue.

    locust -f locust_opac.py --config koha.conf
"""

from locust import between, task
from locust_plugins.users.playwright import PageWithRetry, PlaywrightUser, pw

import koha_locust  # noqa: F401  (check threshold listener)
import koha_settings
import koha_ui
from koha_checks import CheckRecorder
from koha_data import load_words, rando

WORDS = load_words(koha_settings.WORDS_FILE)


class OpacSearchUser(PlaywrightUser):
    host = koha_settings.OPAC_URL
    headless = True
    wait_time = between(koha_settings.WAIT_MIN, koha_settings.WAIT_MAX)

    def on_start(self):
        self.checks = CheckRecorder(self.environment.events.request)

    @task
    @pw
    async def search(self, page: PageWithRetry):
        await koha_ui.search_opac(page, koha_settings.OPAC_URL, rando(WORDS), self.checks)
