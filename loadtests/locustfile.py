"""Delivery load testing: Locust entry point.

Usage:
    # All scenarios (web UI):
    locust -f loadtests/locustfile.py

    # Claim contention only:
    locust -f loadtests/locustfile.py DispatcherUser OrderClaimRaceUser

    # Headless (CI mode):
    locust -f loadtests/locustfile.py --headless -u 50 -r 5 -t 120s --csv=results/loadtest
"""

import logging
import time

from locust import events

from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.claim_race import (  # noqa: F401
    BordereauRaceUser,
    DispatcherUser,
    OrderClaimRaceUser,
)
from loadtests.scenarios.delivery_day import DeliveryDayUser  # noqa: F401

logger = logging.getLogger("loadtest")


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log error details for every failed request, expected conflicts aside."""
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400 and response.status_code != 409:
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, extract_error_detail(response))


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}\n")


@events.test_stop.add_listener
def on_test_stop(**_kwargs):
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}\n")
