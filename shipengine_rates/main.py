from fastapi import FastAPI
from shipengine_rates.api.deps import get_store
from shipengine_rates.api.routes import rates, settings
from shipengine_rates.db.session import init_db
from shipengine_rates.handlers.exception_handlers import init_exception_handlers
import logging
from shipengine_rates.core.logging_config import setup_logging
setup_logging()

logger = logging.getLogger(__name__)

app = FastAPI(title="ShipEngine Rates Service")

#init exception handlers
init_exception_handlers(app)
app.include_router(rates.router, tags=["Rates"])
app.include_router(settings.router, prefix="/settings", tags=["Settings"])

@app.on_event("startup")
async def startup():
    await init_db()
    purged = await get_store().purge_expired()
    logger.info("Removed %s expired cache entries on startup", purged)
