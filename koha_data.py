"""Random, throw-away test data for Koha: patrons, biblios and items."""

import random
import string
import time

BARCODE_CHARS = string.ascii_uppercase + string.ascii_lowercase + string.digits

BIBLIO_LEADER = "00000nam a2200000 i 4500"


def load_words(path):
    """Read a word list, one word per line."""
    with open(path, encoding="utf-8") as fh:
        words = [line.strip() for line in fh if line.strip()]
    if not words:
        raise ValueError(f"Word list {path} is empty")
    return words


def rando(seq):
    return seq[random.randrange(len(seq))]


def random_barcode(length=20):
    return "".join(random.choice(BARCODE_CHARS) for _ in range(length))


def random_cardnumber(now_ms=None):
    """32 hex chars: 48-bit ms timestamp, then 20 random hex; the version-7 nibble sits at index 24."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    ts = format(now_ms, "012x")
    random_hex = "".join(format(random.randrange(256), "02x") for _ in range(16))
    random_hex = random_hex[:12] + "7" + random_hex[13:]
    return ts + random_hex[:20]


def pick_library(libraries, index):
    if not libraries:
        raise ValueError("Koha returned no libraries")
    return libraries[min(index, len(libraries) - 1)]


def stub_patron(reference, words, library_index=1):
    category = reference["patron_categories"][0]
    library = pick_library(reference["libraries"], library_index)
    return {
        "firstname": rando(words),
        "surname": rando(words),
        "cardnumber": random_cardnumber(),
        "library_id": library["library_id"],
        "category_id": category["patron_category_id"],
        "date_of_birth": "1990-01-01",
        "statistics_1": "Koha Stress Test",
    }


def stub_biblio(words):
    """Minimal MARC-in-JSON record with a random two-word title."""
    return {
        "leader": BIBLIO_LEADER,
        "fields": [
            {"001": "123456"},
            {"005": "20250101000000.0"},
            {"008": "250120s2025    xx            000 0 eng d"},
            {"100": {"ind1": "1", "ind2": " ", "subfields": [{"a": "Hall, Kyle"}]}},
            {
                "245": {
                    "ind1": "1",
                    "ind2": "0",
                    "subfields": [
                        {"a": f"{rando(words)} {rando(words)}"},
                        {"b": "A Load Testing Example for Koha"},
                    ],
                }
            },
            {
                "260": {
                    "ind1": " ",
                    "ind2": " ",
                    "subfields": [
                        {"a": "USA"},
                        {"b": "Load Testing Press"},
                        {"c": "2025"},
                    ],
                }
            },
        ],
    }


def stub_item(reference, library_index=1):
    library = pick_library(reference["libraries"], library_index)
    return {
        "external_id": random_barcode(),
        "item_type_id": reference["item_types"][0]["item_type_id"],
        "home_library_id": library["library_id"],
        "holding_library_id": library["library_id"],
    }
