from __future__ import annotations

from prometheus_client import Counter, Histogram, start_http_server

requests_total = Counter(
    "completion_requests_total",
    "Total completion requests handled by the gateway",
    labelnames=["provider", "status"],
)

request_latency_seconds = Histogram(
    "completion_request_latency_seconds",
    "Completion request latency",
    buckets=[0.1, 0.3, 0.5, 1, 2, 5, 10, 30, 60],
    labelnames=["provider"],
)

local_requests_total = Counter(
    "local_model_requests_total",
    "Total requests sent to the local model server",
    labelnames=["endpoint", "status"],
)


def maybe_start_metrics(*, enable: bool, bind: str, port: int) -> None:
    if not enable:
        return
    start_http_server(port, addr=bind)
