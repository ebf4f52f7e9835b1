"""Tests for the enrichment join in the contact pipeline."""

import threading
from unittest.mock import patch

from conftest import IP_API_SUCCESS, IPAPI_CO_SUCCESS
from portfolio.contact.models import TelemetryBundle
from portfolio.contact.pipeline import enrich
from portfolio.observability.correlation import (
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)


def test_lookups_run_concurrently():
    # Each lookup waits for the other; a sequential join would break the barrier
    barrier = threading.Barrier(2, timeout=5)

    def geo(url):
        barrier.wait()
        return IP_API_SUCCESS

    def risk(url):
        barrier.wait()
        return IPAPI_CO_SUCCESS

    with patch("portfolio.contact.geolocation._do_request", side_effect=geo), \
            patch("portfolio.contact.risk._do_request", side_effect=risk):
        geolocation, assessment = enrich(TelemetryBundle(ip="203.0.113.7"))

    assert geolocation.timezone == "America/New_York"
    assert assessment.isp == "Comcast Cable"


def test_lookup_threads_see_correlation_id():
    seen: list[str] = []

    def record(url):
        seen.append(get_correlation_id())
        return {}

    token = set_correlation_id("corr-enrich")
    try:
        with patch("portfolio.contact.geolocation._do_request", side_effect=record), \
                patch("portfolio.contact.risk._do_request", side_effect=record):
            enrich(TelemetryBundle(ip="203.0.113.7"))
    finally:
        reset_correlation_id(token)

    assert seen == ["corr-enrich", "corr-enrich"]


def test_degraded_results_are_joined():
    geolocation, assessment = enrich(TelemetryBundle())

    assert geolocation.city == "Unknown"
    assert geolocation.timezone == "UTC"
    assert assessment.threat_score == 0
