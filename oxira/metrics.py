"""Prometheus metric definitions for Oxira."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# --- Search providers ---

provider_requests_total = Counter(
    "oxira_provider_requests_total",
    "Total outbound requests to external search providers",
    labelnames=["provider", "status"],
)

# --- Retry ---

retry_attempts_total = Counter(
    "oxira_retry_attempts_total",
    "Total retry attempts across all provider and fetch calls",
    labelnames=["fn_name"],
)

retry_exhausted_total = Counter(
    "oxira_retry_exhausted_total",
    "Total times retries were exhausted",
    labelnames=["fn_name"],
)

# --- Rate limiting ---

rate_limit_wait_seconds = Histogram(
    "oxira_rate_limit_wait_seconds",
    "Time spent waiting for a provider rate-limit slot",
    labelnames=["provider"],
    buckets=(0.0, 0.05, 0.1, 0.25, 0.5, 1, 2, 5),
)

# --- Page fetches ---

page_fetches_total = Counter(
    "oxira_page_fetches_total",
    "Total web page fetches",
    labelnames=["status"],
)
