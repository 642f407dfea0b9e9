import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from .abi import FLUID_PROPOSALS_ABI
from .api import cron, health
from .config import Settings, settings
from .core import Keeper
from .core.execution import NetworkConnection, OperatorSigner
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware

logger = logging.getLogger(__name__)


def build_keeper(config: Settings) -> Keeper:
    """Validate configuration and wire the process-wide connection and signer.

    Raises:
        ConfigurationError: MNEMONIC, ETH_URI or CONTRACT_ADDRESS is missing,
            or CONTRACT_ADDRESS is not an address
    """
    config.validate_required()

    connection = NetworkConnection(
        config.eth_uri,
        timeout=config.rpc_timeout_seconds,
        priority_fee_wei=config.default_priority_fee_wei,
    )
    signer = OperatorSigner.from_mnemonic(
        config.mnemonic.get_secret_value(),
        connection,
        derivation_path=config.derivation_path,
    )
    return Keeper.build(
        signer=signer,
        contract_address=config.contract_address,
        abi=FLUID_PROPOSALS_ABI,
        gas_limit=config.gas_limit,
        poll_interval=config.confirmation_poll_seconds,
        confirmation_timeout=config.confirmation_timeout_seconds,
    )


def create_app(keeper: Optional[Keeper] = None, config: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    When no keeper is injected one is built from configuration during
    startup; a ConfigurationError there keeps the server from becoming ready.
    """
    config = config or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        setup_logging(config.log_level)
        owned = keeper is None
        try:
            app.state.keeper = build_keeper(config) if owned else keeper
        except Exception:
            logger.critical("Keeper configuration is invalid; refusing to start", exc_info=True)
            raise
        logger.info(f"Keeper ready as {app.state.keeper.signer.address}")
        try:
            yield
        finally:
            if owned:
                await app.state.keeper.connection.close()

    app = FastAPI(
        title="Fluid Keeper",
        description="Cron-triggered caller for FluidProposals lifecycle functions",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware, trigger_prefix=cron.router.prefix)

    # Include routers
    app.include_router(health.router, tags=["Health"])
    app.include_router(cron.router, tags=["Cron"])

    @app.get("/")
    async def root():
        """Root endpoint with basic info"""
        return {
            "name": "Fluid Keeper",
            "version": "0.1.0",
            "description": "Cron-triggered caller for FluidProposals lifecycle functions",
            "trigger": "/api/cron/fluid-proposal/{function_name}",
            "health": "/healthz",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "keeper.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower()
    )
