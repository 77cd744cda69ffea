import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.core.config import settings
from shared.core.database import Base, engine
from shared.exception_handler import setup_exception_handlers
from .models import leases, payments, tenants, units, utility_profiles  # noqa: F401
from .router.payments import payments_router, rent_router, utilities_router

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s]: %(message)s"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create all tables
    Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(title="Tenancy Service API", lifespan=lifespan)

# Allow requests from the tenant portal
origins = [
    settings.FRONTEND_URL,
    "http://127.0.0.1:8002"
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

# Include routers
app.include_router(payments_router.router)
app.include_router(rent_router.router)
app.include_router(utilities_router.router)
