from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from parafort_core.core.config import get_settings
from parafort_core.core.errors import AppError
from parafort_core.core.logging import configure_logging
from parafort_core.middleware.audit_logging import AuditLoggingMiddleware

settings = get_settings()
configure_logging("DEBUG" if settings.debug else "INFO")

from parafort_core.api.announcement_router import admin_router as admin_announcement_router  # noqa: E402
from parafort_core.api.announcement_router import router as announcement_router  # noqa: E402
from parafort_core.api.auth_router import router as auth_router  # noqa: E402
from parafort_core.api.business_entity_router import router as business_entity_router  # noqa: E402
from parafort_core.api.checkout_router import router as checkout_router  # noqa: E402
from parafort_core.api.cookie_preferences_router import router as cookie_preferences_router  # noqa: E402
from parafort_core.api.formation_order_router import admin_router as admin_formation_order_router  # noqa: E402
from parafort_core.api.formation_order_router import router as formation_order_router  # noqa: E402
from parafort_core.api.health_router import router as health_router  # noqa: E402
from parafort_core.api.payments_router import router as payments_router  # noqa: E402
from parafort_core.api.services_router import router as services_router  # noqa: E402
from parafort_core.api.stripe_webhook_router import router as stripe_webhook_router  # noqa: E402

app = FastAPI(title=settings.app_name)

_allowed_origins = list(settings.cors_origins)
if settings.debug:
    _allowed_origins.extend(["http://localhost:3000", "http://localhost:5173", "http://127.0.0.1:3000"])

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Correlation-ID", "Stripe-Signature"],
    expose_headers=["X-Correlation-ID"],
    max_age=600,
)
app.add_middleware(AuditLoggingMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    trace_id = getattr(request.state, "correlation_id", None)
    return JSONResponse(status_code=exc.status_code, content=exc.to_response(trace_id=trace_id))


app.include_router(health_router)
app.include_router(auth_router)
app.include_router(services_router)
app.include_router(checkout_router)
app.include_router(payments_router)
app.include_router(stripe_webhook_router)
app.include_router(formation_order_router)
app.include_router(admin_formation_order_router)
app.include_router(announcement_router)
app.include_router(admin_announcement_router)
app.include_router(business_entity_router)
app.include_router(cookie_preferences_router)
