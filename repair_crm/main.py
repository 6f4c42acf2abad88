"""
Main FastAPI application entry point.
"""
from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from repair_crm.config import Settings, get_settings
from repair_crm.database import create_engine, create_session_factory, init_db
from repair_crm.errors import register_exception_handlers
from repair_crm.logging_config import setup_logging
from repair_crm.routers import appointments, customers, search, technicians, vehicles, work_orders
from repair_crm.services.notifications import StatusNotifier

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application. Tests pass their own settings; everything else
    uses the environment.
    """
    settings = settings or get_settings()
    setup_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Lifespan events for the application.
        Handles startup and shutdown events.
        """
        # Startup
        logger.info("🚀 Starting %s...", settings.app_name)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.session_factory = create_session_factory(engine)
        app.state.notifier = StatusNotifier(settings)

        logger.info("📊 Initializing database...")
        await init_db(engine)
        logger.info("✅ Database initialized successfully")
        logger.info("🌐 API available at: %s", settings.api_v1_prefix)

        yield

        # Shutdown
        logger.info("👋 Shutting down %s...", settings.app_name)
        await engine.dispose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="""
    ## 🔧 Auto Repair CRM API

    Customer-relationship management for an auto repair shop.

    ### Entities:
    * **Customers**: Contact details and communication preference
    * **Vehicles**: Customer vehicles with mileage and service history
    * **Work Orders**: Services, parts, labor, status and invoicing
    * **Appointments**: Scheduled visits with an assigned technician
    * **Technicians**: Shop staff who carry out the work
    """,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(customers.router, prefix=settings.api_v1_prefix)
    app.include_router(vehicles.router, prefix=settings.api_v1_prefix)
    app.include_router(technicians.router, prefix=settings.api_v1_prefix)
    app.include_router(work_orders.router, prefix=settings.api_v1_prefix)
    app.include_router(appointments.router, prefix=settings.api_v1_prefix)
    app.include_router(search.router, prefix=settings.api_v1_prefix)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": f"Welcome to {settings.app_name} API",
            "version": settings.app_version,
            "docs": "/docs",
            "redoc": "/redoc",
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": settings.app_version,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "repair_crm.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().debug,
    )
