import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from hourbook.api.v1.bookings import router as bookings_router
from hourbook.api.v1.config import router as config_router
from hourbook.core.config import settings


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("date_key", "time_key", "user", "duration", "code", "error", "reason"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

logger = logging.getLogger(__name__)

app = FastAPI(title="Hourly Booking Calendar", version="1.0.0")

app.include_router(bookings_router, prefix="/api", tags=["bookings"])
app.include_router(config_router, prefix="/api", tags=["config"])


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted({".".join(str(p) for p in err.get("loc", ())[1:]) or "body" for err in exc.errors()})
    logger.info("Rejected invalid booking input", extra={"reason": ", ".join(fields)})
    return JSONResponse(
        status_code=400,
        content={
            "error": f"Missing or invalid fields: {', '.join(fields)}",
            "code": "validation_error",
            "fields": fields,
        },
    )


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
