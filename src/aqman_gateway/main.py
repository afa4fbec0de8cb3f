"""
Aqman Gateway - FastAPI application entry point.
"""

import argparse
import logging
import os
import sys
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from . import __version__
from .config import get_config, set_config, GatewayConfig
from .errors import register_error_handlers
from .registry import RegistryStore
from .api import devices_router, health_router, DeviceClient

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format=LOG_FORMAT,
    handlers=[
        logging.StreamHandler(sys.stdout),
    ]
)
logger = logging.getLogger(__name__)


def configure_logging(config: GatewayConfig) -> None:
    """Apply the configured level and add a rotating file handler if requested."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))

    if config.log_file:
        for handler in root_logger.handlers:
            if isinstance(handler, RotatingFileHandler) and handler.baseFilename == os.path.abspath(config.log_file):
                return
        file_handler = RotatingFileHandler(
            config.log_file,
            maxBytes=config.log_max_bytes,
            backupCount=config.log_backup_count,
        )
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(file_handler)
        logger.info(f"Logging to file: {config.log_file}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    config = app.state.config
    configure_logging(config)

    if app.state.store is None:
        app.state.store = RegistryStore(config.db_path)
    if app.state.device_client is None:
        app.state.device_client = DeviceClient(timeout=config.device_timeout)

    # Startup
    logger.info("=" * 60)
    logger.info(f"Aqman Gateway v{__version__}")
    logger.info("=" * 60)
    logger.info(f"Host: {config.host}:{config.port}")
    logger.info(f"Database: {app.state.store.db_path}")
    logger.info(f"Device timeout: {app.state.device_client.timeout}s")
    logger.info(f"Registered devices: {app.state.store.count()}")
    logger.info("=" * 60)

    yield

    # Shutdown
    logger.info("Aqman Gateway stopped")


def create_app(
    config: Optional[GatewayConfig] = None,
    store: Optional[RegistryStore] = None,
    device_client: Optional[DeviceClient] = None,
) -> FastAPI:
    """
    Build the gateway application.

    Args:
        config: Settings to use (defaults to the global configuration)
        store: Registry store; created from ``config.db_path`` at startup if omitted
        device_client: Client for device queries; created at startup if omitted
    """
    config = config or get_config()

    app = FastAPI(
        title="Aqman Gateway",
        description="Device registry and state proxy for Aqman units",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.store = store
    app.state.device_client = device_client

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # Register routers with /api prefix
    app.include_router(devices_router, prefix="/api")
    app.include_router(health_router)

    return app


# Application built from the environment, for `uvicorn aqman_gateway.main:app`
app = create_app()


def main():
    """Run the Aqman Gateway."""
    env_config = GatewayConfig.from_env()

    parser = argparse.ArgumentParser(description="Aqman Gateway")
    parser.add_argument(
        "--port",
        type=int,
        default=env_config.port,
        help=f"Port to run the service on (default: {env_config.port})"
    )
    parser.add_argument(
        "--host",
        type=str,
        default=env_config.host,
        help=f"Host to bind to (default: {env_config.host})"
    )
    parser.add_argument(
        "--db-path",
        type=str,
        default=env_config.db_path,
        help=f"SQLite registry file (default: {env_config.db_path})"
    )
    parser.add_argument(
        "--device-timeout",
        type=float,
        default=env_config.device_timeout,
        help=f"Seconds to wait for a device to answer (default: {env_config.device_timeout})"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=env_config.log_level,
        help=f"Logging level (default: {env_config.log_level})"
    )

    args = parser.parse_args()

    env_config.host = args.host
    env_config.port = args.port
    env_config.db_path = args.db_path
    env_config.device_timeout = args.device_timeout
    env_config.log_level = args.log_level
    set_config(env_config)

    logger.info(f"Starting Aqman Gateway on {args.host}:{args.port}")

    uvicorn.run(
        create_app(env_config),
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
    )


if __name__ == "__main__":
    main()
