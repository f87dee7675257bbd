import logging
from datetime import datetime

from fastapi import FastAPI

from .config import settings
from .middleware.rate_limit import rate_limit_middleware
from .routers import bookings, services, slots, stores

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Car Service Booking API")

app.middleware("http")(rate_limit_middleware)

app.include_router(stores.router)
app.include_router(services.router)
app.include_router(slots.router)
app.include_router(bookings.router)


@app.get("/health")
def health():
    return {"status": "ok", "time": datetime.now().isoformat()}
