"""FastAPI app exposing health checks and metrics of the controller."""

import asyncio
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from . import __version__
from .controller import IngressController
from .logging_config import get_logger, log_api_request, log_api_response, log_function_entry, log_function_exit

logger = get_logger(__name__)

app = FastAPI(
    title="ingress-monitor-controller",
    description="Keeps website monitors in sync with Kubernetes ingresses",
    version=__version__,
    docs_url=None,
    redoc_url=None,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests and responses."""
    start_time = asyncio.get_event_loop().time()

    log_api_request(logger, request.method, str(request.url.path),
                    client_ip=request.client.host if request.client else "unknown")

    response = await call_next(request)

    duration = asyncio.get_event_loop().time() - start_time
    log_api_response(logger, request.method, str(request.url.path),
                     response.status_code,
                     duration_ms=round(duration * 1000, 2))

    return response

# Global controller instance
controller: Optional[IngressController] = None


def initialize_controller(ingress_controller: IngressController) -> None:
    """Set the controller that is started together with the app."""
    log_function_entry(logger, "initialize_controller", namespace=ingress_controller.namespace)
    global controller
    controller = ingress_controller
    log_function_exit(logger, "initialize_controller", status="success")


@app.get("/healthz")
async def health_check():
    """Liveness check."""
    return {"status": "healthy", "service": "ingress-monitor-controller"}


@app.get("/readyz")
async def readiness_check():
    """Readiness check, fails until the ingress operator is running."""
    if controller is None or not controller.ready:
        raise HTTPException(status_code=503, detail="Controller not ready")
    return {"status": "ready"}


@app.get("/metrics")
async def metrics():
    """Prometheus metrics."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.on_event("startup")
async def startup_event():
    """Start the controller in the background."""
    if controller:
        controller.start()
        logger.info("Controller started")


@app.on_event("shutdown")
async def shutdown_event():
    """Stop the controller."""
    logger.info("Shutting down ingress-monitor-controller")
    if controller:
        await asyncio.to_thread(controller.stop)
