"""
Bank Portal API Application Factory
"""

from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .system import BankingSystem, get_banking_system
from .customers import router as customers_router
from .branches import router as branches_router, department_router
from .employees import router as employees_router
from .accounts import router as accounts_router
from .admin import router as admin_router
from .loans import router as loans_router
from .user import router as user_router
from .notifications import router as notifications_router
from .. import __version__
from ..config import get_config
from ..errors import BankingError
from ..logging_config import setup_logging, get_logger, log_action


def create_app(system: Optional[BankingSystem] = None) -> FastAPI:
    """
    Create and configure the FastAPI application

    Args:
        system: Banking system to serve; the global one when omitted
    """
    config = get_config()
    logger = get_logger("bank_portal.api")

    def current_system() -> BankingSystem:
        return system or get_banking_system()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(config.log_level, config.log_format, config.log_file)
        banking = current_system()
        if config.scheduler_enabled:
            banking.scheduler.start()
        logger.info("Bank portal API started")

        yield

        banking.scheduler.shutdown()
        logger.info("Bank portal API stopped")

    app = FastAPI(
        title="Bank Portal API",
        description="Branch banking back office and customer portal",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in config.cors_origins.split(",")],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if system is not None:
        app.dependency_overrides[get_banking_system] = lambda: system

    @app.exception_handler(BankingError)
    async def banking_error_handler(request: Request, exc: BankingError):
        log_action(
            logger, "warning", exc.message,
            action="request_failed", resource=f"{request.method} {request.url.path}",
            extra={"status_code": exc.status_code, "error": type(exc).__name__}
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"status": "error", "message": exc.message}
        )

    prefix = config.api_prefix
    app.include_router(customers_router, prefix=f"{prefix}/admin/customers", tags=["Customers"])
    app.include_router(branches_router, prefix=f"{prefix}/admin/branch", tags=["Branches"])
    app.include_router(department_router, prefix=f"{prefix}/admin/department", tags=["Departments"])
    app.include_router(employees_router, prefix=f"{prefix}/admin/employee", tags=["Employees"])
    app.include_router(accounts_router, prefix=f"{prefix}/admin/accounts", tags=["Accounts"])
    app.include_router(loans_router, prefix=f"{prefix}/admin/loans", tags=["Loans"])
    app.include_router(admin_router, prefix=f"{prefix}/admin", tags=["Admin"])
    app.include_router(notifications_router, prefix=f"{prefix}/user", tags=["Notifications"])
    app.include_router(user_router, prefix=f"{prefix}/user", tags=["User"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "bank_portal_api",
            "version": __version__
        }

    @app.get("/")
    async def get_api_info():
        """Get API information"""
        return {
            "name": "Bank Portal API",
            "version": __version__,
            "description": "Branch banking back office and customer portal",
            "endpoints": {
                "docs": "/docs",
                "health": "/health",
                "admin": f"{prefix}/admin",
                "user": f"{prefix}/user"
            }
        }

    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None, debug: bool = False):
    """Run the FastAPI server"""
    config = get_config()
    uvicorn.run(
        "bank_portal.api:create_app",
        factory=True,
        host=host or config.api_host,
        port=port or config.api_port,
        reload=debug,
        log_level=config.log_level.lower()
    )
