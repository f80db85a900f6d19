import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI

from venue_pricing.core.config import settings
from venue_pricing.database.connection import Base, engine
from venue_pricing.routes import system
from venue_pricing.routes.pricing.pricing_route import router as pricing_router
from venue_pricing.routes.pricing.calculate_price import router as calculate_price_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    app.state.start_time = datetime.utcnow()
    logger.info("Pricing service started (venue timezone %s)", settings.VENUE_TIMEZONE)
    yield


app = FastAPI(title="Venue Pricing & Promotions", lifespan=lifespan)

app.include_router(pricing_router)
app.include_router(calculate_price_router)
app.include_router(system.router)
