"""Media Gateway Prometheus 메트릭"""

from fastapi import FastAPI
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, generate_latest

REGISTRY = CollectorRegistry(auto_describe=True)
METRICS_PATH = "/metrics/status"

UPLOADS_TOTAL = Counter(
    "media_gateway_uploads_total",
    "Upload attempts by intent and result",
    ["intent", "result"],
    registry=REGISTRY,
)
UPLOAD_BYTES_TOTAL = Counter(
    "media_gateway_upload_bytes_total",
    "Bytes written to the object store",
    ["intent"],
    registry=REGISTRY,
)
PROXY_REQUESTS_TOTAL = Counter(
    "media_gateway_proxy_requests_total",
    "Proxy relay requests by outcome",
    ["outcome"],
    registry=REGISTRY,
)


def register_metrics(app: FastAPI) -> None:
    """Prometheus /metrics 엔드포인트 등록"""

    @app.get(METRICS_PATH, include_in_schema=False)
    async def metrics_endpoint() -> Response:
        return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)
