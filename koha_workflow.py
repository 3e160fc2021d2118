"""One virtual-user iteration: log in, circulate an item, search, clean up."""

import asyncio
import logging
import random

import koha_settings
import koha_ui
from koha_data import rando, stub_biblio, stub_item, stub_patron

logger = logging.getLogger(__name__)


async def pause(maximum):
    if maximum > 0:
        await asyncio.sleep(random.uniform(0, maximum))


class CirculationWorkflow:
    def __init__(self, api, checks, words,
                 staff_url=koha_settings.STAFF_URL,
                 opac_url=koha_settings.OPAC_URL,
                 username=koha_settings.STAFF_USER,
                 password=koha_settings.STAFF_PASS,
                 setup_pause=koha_settings.SETUP_PAUSE,
                 circ_pause=koha_settings.CIRC_PAUSE,
                 library_index=koha_settings.LIBRARY_INDEX,
                 verify_checkin=koha_settings.VERIFY_CHECKIN):
        self.api = api
        self.checks = checks
        self.words = words
        self.staff_url = staff_url
        self.opac_url = opac_url
        self.username = username
        self.password = password
        self.setup_pause = setup_pause
        self.circ_pause = circ_pause
        self.library_index = library_index
        self.verify_checkin = verify_checkin

    async def circulate(self, page, patron, item):
        """Check in, check out, check back in, then search the OPAC."""
        await pause(self.circ_pause)
        await koha_ui.checkin(page, self.staff_url, item, self.checks, verify=False)
        await pause(self.circ_pause)
        await koha_ui.checkout(page, self.staff_url, patron, item, self.checks)
        await pause(self.circ_pause)
        await koha_ui.checkin(page, self.staff_url, item, self.checks, verify=self.verify_checkin)

        term = rando(self.words)
        logger.info("Using search term: %s", term)
        await koha_ui.search_opac(page, self.opac_url, term, self.checks)

    async def run_created(self, page, reference):
        """Full iteration on freshly created patron, biblio and item."""
        logger.info("Logging in to Koha")
        await koha_ui.login(page, self.staff_url, self.username, self.password, self.checks)
        created = {}
        try:
            await pause(self.setup_pause)
            created["patron"] = self.api.create_patron(
                stub_patron(reference, self.words, self.library_index))
            await pause(self.setup_pause)
            created["biblio"] = self.api.create_biblio(stub_biblio(self.words))
            await pause(self.setup_pause)
            created["item"] = self.api.create_item(
                created["biblio"]["id"], stub_item(reference, self.library_index))

            await self.circulate(page, created["patron"], created["item"])
        except Exception as exc:
            logger.error("ERROR! %s", exc)
            await koha_ui.screenshot(page, "test_error.png")
            raise
        finally:
            self.cleanup(created)
            await koha_ui.logout(page, self.staff_url)
        return created

    async def run_existing(self, page, patrons, items):
        """Iteration against patrons and items that already exist in Koha."""
        patron = random.choice(patrons)
        item = random.choice(items)
        logger.info("Logging in to Koha")
        await koha_ui.login(page, self.staff_url, self.username, self.password, self.checks)
        try:
            await self.circulate(page, patron, item)
        except Exception as exc:
            logger.error("ERROR! %s", exc)
            await koha_ui.screenshot(page, "test_error.png")
            raise
        finally:
            await koha_ui.logout(page, self.staff_url)
        return patron, item

    def cleanup(self, created):
        # A biblio with attached items cannot be deleted
        if "item" in created:
            self.api.delete_item(created["item"]["item_id"])
        if "biblio" in created:
            self.api.delete_biblio(created["biblio"]["id"])
        if "patron" in created:
            self.api.delete_patron(created["patron"]["patron_id"])
