from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from newsletter.api.health import router as health_router
from newsletter.api.metrics import router as metrics_router
from newsletter.api.subscription import router as subscription_router
from newsletter.config import get_settings
from newsletter.db.store import SubscriberStore
from newsletter.observability.logging import configure_logging
from newsletter.observability.middleware import RequestContextMiddleware


app = FastAPI(title="Newsletter Subscriptions", version="0.1.0")
app.add_middleware(RequestContextMiddleware)
app.include_router(health_router)
app.include_router(subscription_router)
app.include_router(metrics_router)


@app.on_event("startup")
def _startup() -> None:
    settings = get_settings()
    configure_logging(settings.log_level, json_output=settings.log_json)
    settings.storage_path.mkdir(parents=True, exist_ok=True)
    app.state.store = SubscriberStore(settings.storage_path)


@app.exception_handler(RequestValidationError)
async def _invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Malformed bodies are client errors like any other invalid subscriber.
    return JSONResponse(status_code=400, content={"detail": "Request body must be a JSON object"})
