from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from painel.config import AUTH_RESOLUTION_TIMEOUT_SECONDS, FRONTEND_URL, LOG_LEVEL
from painel.exception_handlers import register_exception_handlers
from painel.routes import appointments, auth, catalog, clients, dashboard, employees, schedule_blocks, settings, users
from painel.services.access_gate import AccessGate
from painel.services.supabase import (
    SupabaseDataProvider,
    SupabaseIdentityProvider,
    SupabaseUserFunctions,
    create_supabase_client,
)

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    supabase = await create_supabase_client()
    data = SupabaseDataProvider(supabase)
    gate = AccessGate(SupabaseIdentityProvider(supabase), data, timeout=AUTH_RESOLUTION_TIMEOUT_SECONDS)

    app.state.data = data
    app.state.gate = gate
    app.state.user_functions = SupabaseUserFunctions(supabase)

    await gate.start()
    logger.info("Access gate started")
    try:
        yield
    finally:
        await gate.stop()
        logger.info("Access gate stopped")


app = FastAPI(
    redirect_slashes=False,
    title="Painel API",
    description="Operations dashboard for clients, appointments, employees and services",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(auth.views_router)
app.include_router(auth.router, prefix="/auth")
app.include_router(dashboard.router)
app.include_router(clients.router, prefix="/clients")
app.include_router(appointments.router, prefix="/appointments")
app.include_router(employees.router, prefix="/employees")
app.include_router(catalog.router, prefix="/catalog")
app.include_router(schedule_blocks.router, prefix="/schedule-blocks")
app.include_router(settings.router, prefix="/settings")
app.include_router(users.router, prefix="/users")
