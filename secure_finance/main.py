from contextlib import asynccontextmanager

from fastapi import FastAPI

from secure_finance.db.core import Base, engine
from secure_finance.logging_config import setup_logging, get_logger
from secure_finance.services.user_cache import UserIdCache
from secure_finance.routers.users import router as users_router
from secure_finance.routers.colours import router as colours_router
from secure_finance.routers.categories import router as categories_router
from secure_finance.routers.subcategories import router as subcategories_router
from secure_finance.routers.labels import router as labels_router
from secure_finance.routers.entries import router as entries_router
from secure_finance.routers.entry_labels import router as entry_labels_router

API_PREFIX = "/secure-finance-manager"

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready")
    yield


app = FastAPI(title="Secure Finance Manager", lifespan=lifespan)
app.state.user_cache = UserIdCache()

app.include_router(users_router, prefix=API_PREFIX)
app.include_router(colours_router, prefix=API_PREFIX)
app.include_router(entries_router, prefix=API_PREFIX)
app.include_router(categories_router, prefix=API_PREFIX)
app.include_router(subcategories_router, prefix=API_PREFIX)
app.include_router(labels_router, prefix=API_PREFIX)
app.include_router(entry_labels_router, prefix=API_PREFIX)


@app.get("/")
def read_root():
    return "Server is running."
