"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from coinwallet.config import settings
from coinwallet.context import AppContext
from coinwallet.api.routes import accounts, coins, wallets

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await app.state.context.close()


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="Multi-currency wallet API",
        lifespan=lifespan
    )
    app.state.context = context or AppContext(settings)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(accounts.router, prefix=f"{settings.api_prefix}/accounts", tags=["accounts"])
    app.include_router(coins.router, prefix=f"{settings.api_prefix}/coins", tags=["coins"])
    app.include_router(wallets.router, prefix=f"{settings.api_prefix}/wallets", tags=["wallets"])

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": "Coin Wallet API",
            "version": settings.api_version,
            "docs": "/docs"
        }

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
