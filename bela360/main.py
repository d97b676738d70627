import logging

from fastapi import APIRouter, FastAPI

from bela360.api.v1.appointments import router as appointments_router
from bela360.api.v1.availability import router as availability_router
from bela360.api.v1.conversations import router as conversations_router
from bela360.core.config import settings


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("business_id", "professional_id", "service_id", "appointment_id", "time", "key", "error"):
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

app = FastAPI(title="bela360 booking", version="1.0.0")

api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(availability_router, tags=["availability"])
api_v1.include_router(appointments_router, tags=["appointments"])
api_v1.include_router(conversations_router, tags=["conversations"])
app.include_router(api_v1)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
