"""Thin client for the parts of the Koha REST API the load tests touch.

The session is a ``locust.clients.HttpSession`` (``HttpUser.client`` or one
built by hand for browser users), so every call lands in the Locust stats.
Basic-auth credentials travel embedded in the session's base URL.
"""

import json
import logging
import threading

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Accept": "application/json", "Content-Type": "application/json"}
MARC_HEADERS = {"Accept": "application/json", "Content-Type": "application/marc-in-json"}


class KohaApiError(Exception):
    """A create call did not return the expected status or payload."""


def _json_or_none(res):
    try:
        return res.json()
    except ValueError:
        return None


class KohaApi:
    def __init__(self, session, prefix="/api/v1", checks=None):
        self.session = session
        self.prefix = prefix.rstrip("/")
        self.checks = checks

    def _check(self, name, passed, detail=None):
        if self.checks is not None:
            self.checks.check(name, passed, detail)
        return passed

    # ── Reads ──────────────────────────────────────────────────────────────

    def get_collection(self, resource, per_page=500):
        url = f"{self.prefix}/{resource}?_per_page={per_page}"
        name = f"GET {self.prefix}/{resource}"
        with self.session.get(url, headers={"Accept": "application/json"},
                              name=name, catch_response=True) as res:
            body = _json_or_none(res)
            ok = res.status_code == 200 and isinstance(body, list)
            if ok:
                res.success()
            else:
                res.failure(f"Status {res.status_code}")
            self._check(f"{resource} status is 200", ok, f"status {res.status_code}")
        if not ok:
            raise KohaApiError(f"Could not load {resource}: status {res.status_code}")
        logger.info("Loaded %d %s", len(body), resource)
        return body

    def load_reference_data(self, per_page=500):
        return {
            "patron_categories": self.get_collection("patron_categories", per_page),
            "libraries": self.get_collection("libraries", per_page),
            "item_types": self.get_collection("item_types", per_page),
        }

    def list_patrons(self, per_page=500):
        return self.get_collection("patrons", per_page)

    def list_items(self, per_page=500):
        return self.get_collection("items", per_page)

    # ── Creates ────────────────────────────────────────────────────────────

    def _create(self, url, name, payload, headers, expected_status, id_field, label):
        data = json.dumps(payload)
        with self.session.post(url, data=data, headers=headers,
                               name=name, catch_response=True) as res:
            body = _json_or_none(res)
            status_ok = res.status_code == expected_status
            has_id = isinstance(body, dict) and body.get(id_field) is not None
            if status_ok and has_id:
                res.success()
            else:
                res.failure(f"Status {res.status_code}, {id_field} present: {has_id}")
            self._check(f"{label} created", status_ok, f"status {res.status_code}")
            self._check(f"Response body contains new {label} data", has_id, res.text[:200])
        if not (status_ok and has_id):
            logger.error("Failed to create %s: %s %s %s", label, res.status_code, res.text, data)
            raise KohaApiError(f"Failed to create {label}: status {res.status_code}")
        return body

    def create_patron(self, patron):
        logger.debug("Creating patron %s", patron)
        created = self._create(
            f"{self.prefix}/patrons", f"POST {self.prefix}/patrons",
            patron, JSON_HEADERS, 201, "patron_id", "patron",
        )
        logger.info("Created stub patron %s (%s)", created["patron_id"], created.get("cardnumber"))
        return created

    def create_biblio(self, record):
        created = self._create(
            f"{self.prefix}/biblios", f"POST {self.prefix}/biblios",
            record, MARC_HEADERS, 200, "id", "biblio",
        )
        logger.info("Created biblio %s", created["id"])
        return created

    def create_item(self, biblio_id, item):
        logger.debug("Creating item %s", item)
        created = self._create(
            f"{self.prefix}/biblios/{biblio_id}/items",
            f"POST {self.prefix}/biblios/[id]/items",
            item, JSON_HEADERS, 201, "item_id", "item",
        )
        logger.info("Created item %s (%s)", created["item_id"], created.get("external_id"))
        return created

    # ── Deletes ────────────────────────────────────────────────────────────

    def _delete(self, resource, entity_id, label):
        with self.session.delete(f"{self.prefix}/{resource}/{entity_id}",
                                 name=f"DELETE {self.prefix}/{resource}/[id]",
                                 catch_response=True) as res:
            ok = res.status_code == 204
            if ok:
                res.success()
            else:
                res.failure(f"Status {res.status_code}")
            self._check(f"{label} deleted (204 No Content)", ok, f"status {res.status_code}")
        if ok:
            logger.info("Deleted %s %s", label, entity_id)
        return ok

    def delete_item(self, item_id):
        return self._delete("items", item_id, "item")

    def delete_biblio(self, biblio_id):
        return self._delete("biblios", biblio_id, "biblio")

    def delete_patron(self, patron_id):
        return self._delete("patrons", patron_id, "patron")


class ReferenceData:
    """Patron categories, libraries and item types, fetched once per process."""

    def __init__(self):
        self.lock = threading.Lock()
        self.data = None

    def get(self, api, per_page=500):
        if self.data is not None:
            return self.data
        with self.lock:
            if self.data is None:
                self.data = api.load_reference_data(per_page)
        return self.data

    def reset(self):
        with self.lock:
            self.data = None
