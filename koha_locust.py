"""Locust glue shared by the Koha locustfiles."""

import logging

from locust import events
from locust.clients import HttpSession
import locust_plugins  # noqa: F401  (registers --iterations for every workload)

import koha_settings
from koha_api import KohaApi, ReferenceData
from koha_checks import CheckRecorder, enforce_threshold

logger = logging.getLogger(__name__)

REFERENCE = ReferenceData()


def api_session(environment, user=None):
    """HttpSession on the credentialed staff URL, reporting into ``environment``."""
    return HttpSession(
        base_url=koha_settings.API_ROOT,
        request_event=environment.events.request,
        user=user,
    )


def koha_api(environment, user=None, checks=None):
    if checks is None:
        checks = CheckRecorder(environment.events.request)
    return KohaApi(api_session(environment, user), koha_settings.API_PREFIX, checks)


def load_reference(environment, **kwargs):
    reference = REFERENCE.get(koha_api(environment), koha_settings.PER_PAGE)
    logger.info("Reference data: %d patron categories, %d libraries, %d item types",
                len(reference["patron_categories"]), len(reference["libraries"]),
                len(reference["item_types"]))


def apply_check_threshold(environment, **kwargs):
    enforce_threshold(environment, koha_settings.CHECK_PASS_RATE)


events.quitting.add_listener(apply_check_threshold)
