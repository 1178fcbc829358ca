"""Prometheus metrics for docshelf.

Defines operational metrics for monitoring and alerting; exposed at GET /metrics.
"""

from prometheus_client import Counter, Histogram

# Upload metrics
documents_uploaded_total = Counter(
    "docshelf_documents_uploaded_total",
    "Total number of documents uploaded",
    ["status"]  # status: success|rejected|error
)

upload_size_bytes = Histogram(
    "docshelf_upload_size_bytes",
    "Size of uploaded documents in bytes",
    buckets=[1024, 10 * 1024, 100 * 1024, 1024 ** 2, 10 * 1024 ** 2, 100 * 1024 ** 2]
)

# Analysis metrics
analysis_runs_total = Counter(
    "docshelf_analysis_runs_total",
    "Total analysis attempts",
    ["strategy", "outcome"]  # strategy: text|attachment|metadata, outcome: success|error|skipped
)

analysis_terminal_failures_total = Counter(
    "docshelf_analysis_terminal_failures_total",
    "Documents marked analyzed after all retries failed"
)

classifier_latency_ms = Histogram(
    "docshelf_classifier_latency_ms",
    "AI classifier call latency in milliseconds",
    ["provider", "strategy"],
    buckets=[50, 100, 250, 500, 1000, 2500, 5000, 10000, 30000, 60000]
)

sensitivity_results_total = Counter(
    "docshelf_sensitivity_results_total",
    "Classification results by sensitivity",
    ["sensitivity"]
)

# Visibility metrics
visibility_transitions_total = Counter(
    "docshelf_visibility_transitions_total",
    "Document visibility transitions",
    ["transition"]  # publish|unpublish|forced_unpublish
)

# Sharing metrics
share_grant_operations_total = Counter(
    "docshelf_share_grant_operations_total",
    "Share ledger operations",
    ["operation", "status"]  # operation: grant|update|revoke
)

# HTTP metrics
http_request_duration_ms = Histogram(
    "docshelf_http_request_duration_ms",
    "HTTP request latency in milliseconds",
    ["method", "status_code"],
    buckets=[5, 10, 25, 50, 100, 250, 500, 1000, 2500, 10000]
)
