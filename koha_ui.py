"""Browser steps against the Koha staff interface and the OPAC.

Each step takes a Playwright async ``Page`` and a ``CheckRecorder``. Lookups
that fail after the action went through are recorded as failed checks and
leave a screenshot behind. Navigation failures propagate.
"""

import logging
import os

import koha_settings

logger = logging.getLogger(__name__)


async def screenshot(page, name):
    path = os.path.join(koha_settings.SCREENSHOT_DIR, name)
    try:
        await page.screenshot(path=path)
        logger.info("Saved screenshot %s", path)
    except Exception as exc:
        logger.warning("Could not save screenshot %s: %s", path, exc)
    return path


async def login(page, staff_url, username, password, checks):
    """Log into the staff interface and return the page."""
    try:
        await page.goto(f"{staff_url}/cgi-bin/koha/mainpage.pl", wait_until="networkidle")

        local_login = page.locator("#locallogin_button")
        if await local_login.count() > 0:
            logger.info("Local login button found, clicking to show login form")
            await local_login.click()

        await page.locator('input[name="login_userid"]').fill(username)
        await page.locator('input[name="login_password"]').fill(password)

        async with page.expect_navigation():
            await page.locator("#submit-button").click(force=True)
    except Exception as exc:
        logger.error("Login failed: %s", exc)
        await screenshot(page, "login_error.png")
        raise

    try:
        logged_in_as = await page.locator("span.loggedinusername").first.text_content()
        checks.check("logged in username matches",
                     (logged_in_as or "").strip() == username,
                     f"got {logged_in_as!r}")
        logger.info("Logged in as %s", username)
    except Exception as exc:
        logger.error("Failed to find logged in username: %s", exc)
        checks.check("logged in username matches", False, str(exc))
        await screenshot(page, "login_error.png")
    return page


async def logout(page, staff_url):
    await page.goto(f"{staff_url}/cgi-bin/koha/staff/logout.pl")
    await page.wait_for_selector("body")


async def _click_if_present(page, text):
    link = page.locator("a", has_text=text)
    if await link.count() > 0:
        logger.info('Found "%s", clicking it', text)
        async with page.expect_navigation():
            await link.first.click()
        return True
    return False


async def checkout(page, staff_url, patron, item, checks):
    borrowernumber = patron["patron_id"]
    cardnumber = patron["cardnumber"]
    barcode = item["external_id"]
    logger.info("Check out %s to %s (%s)", barcode, cardnumber, borrowernumber)

    await page.goto(f"{staff_url}/cgi-bin/koha/circ/circulation.pl?borrowernumber={borrowernumber}")

    # Restricted or flagged accounts need a confirmation first
    await _click_if_present(page, "Override restriction temporarily")
    await _click_if_present(page, "Yes, check out")

    await page.wait_for_selector("label.circ_barcode", timeout=10000)
    try:
        checking_out_to = await page.locator("label.circ_barcode").first.text_content()
        checks.check("checkout user matches", cardnumber in (checking_out_to or ""),
                     f"{cardnumber} not in {checking_out_to!r}")
    except Exception as exc:
        logger.error("Failed to find checkout to patron: %s", exc)
        checks.check("checkout user matches", False, str(exc))
        await screenshot(page, f"checkout_failure_to_{barcode}_{cardnumber}.png")

    await page.locator('#circ_circulation_issue input[name="barcode"]').fill(barcode)
    async with page.expect_navigation():
        await page.locator('#circ_circulation_issue button[type="submit"]').click()

    try:
        checked_out = await page.locator(".lastchecked p").first.text_content()
        checks.check("checked out item matches", barcode in (checked_out or ""),
                     f"{barcode} not in {checked_out!r}")
    except Exception as exc:
        logger.error("Failed to check out item: %s", exc)
        checks.check("checked out item matches", False, str(exc))
        await screenshot(page, f"checkout_failure_{barcode}_{cardnumber}.png")


async def checkin(page, staff_url, item, checks, verify=False):
    barcode = item["external_id"]
    logger.info("Check in %s", barcode)

    await page.goto(f"{staff_url}/cgi-bin/koha/circ/returns.pl")
    await page.wait_for_selector("body")

    await page.locator("#barcode").fill(barcode)
    async with page.expect_navigation():
        await page.locator('#circ_returns_checkin button[type="submit"]').click()
    await page.wait_for_selector("body")

    if not verify:
        return
    # Items that were not checked out only produce a message, no table row
    try:
        checked_in = await page.locator("#checkedintable").first.text_content()
        checks.check("checked in item matches", barcode in (checked_in or ""),
                     f"{barcode} not in checked-in table")
    except Exception as exc:
        logger.error("Failed to check in item: %s", exc)
        checks.check("checked in item matches", False, str(exc))
        await screenshot(page, f"checkin_failure_{barcode}.png")


async def search_opac(page, opac_url, term, checks):
    logger.info("Searching OPAC for %s", term)
    await page.goto(opac_url)

    await page.locator('input[name="q"]').fill(term)
    async with page.expect_navigation():
        await page.locator("#searchsubmit").click()
    await page.wait_for_selector("body")

    try:
        results = await page.locator("#numresults").text_content()
        logger.info("Results: %s", (results or "").strip())
        checks.check("results are not empty", results != "", f"no results text for {term!r}")
    except Exception as exc:
        logger.error("Failed to get results for search term %s: %s", term, exc)
        checks.check("results are not empty", False, str(exc))
        await screenshot(page, f"failed_opac_search_{term}.png")
