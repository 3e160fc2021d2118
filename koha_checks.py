"""Named pass/fail checks reported through Locust's request event.

Checks show up in the Locust stats table (type ``CHECK``) next to the HTTP
and browser requests, and in the ``--csv`` output used by plot_results.py.
"""

import logging

logger = logging.getLogger(__name__)

CHECK = "CHECK"


class CheckFailed(AssertionError):
    pass


class CheckRecorder:
    def __init__(self, request_event):
        self.request_event = request_event
        self.passes = 0
        self.failures = 0

    def check(self, name, passed, detail=None):
        """Record one check. Never raises; returns ``passed``."""
        passed = bool(passed)
        exception = None
        if passed:
            self.passes += 1
        else:
            self.failures += 1
            exception = CheckFailed(detail or name)
            logger.warning("Check failed: %s (%s)", name, detail or "no detail")
        self.request_event.fire(
            request_type=CHECK,
            name=name,
            response_time=0,
            response_length=0,
            response=None,
            context={},
            exception=exception,
        )
        return passed


def check_pass_rate(stats):
    """Fraction of passed checks across all ``CHECK`` entries (1.0 if none ran)."""
    total = failed = 0
    for entry in stats.entries.values():
        if entry.method != CHECK:
            continue
        total += entry.num_requests
        failed += entry.num_failures
    if total == 0:
        return 1.0
    return (total - failed) / total


def enforce_threshold(environment, minimum):
    rate = check_pass_rate(environment.stats)
    if rate < minimum:
        logger.error("Check pass rate %.3f below threshold %.3f", rate, minimum)
        environment.process_exit_code = 1
    else:
        logger.info("Check pass rate %.3f (threshold %.3f)", rate, minimum)
    return rate
