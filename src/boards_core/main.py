"""FastAPI application factory for the boards core."""

import os
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from loguru import logger
from sqlalchemy.engine import Engine

from boards_core.connectors.base import PlatformConnector
from boards_core.connectors.factory import ConnectorFactory
from boards_core.database import create_db_engine, init_db
from boards_core.repositories.store import Store
from boards_core.routers import boards_and_blocks_router
from boards_core.services.boards_and_blocks_service import BatchMutationEngine
from boards_core.services.permission_service import PermissionService
from boards_core.services.service_account import DEFAULT_BOT_USERNAME, Notifier, ServiceAccount

load_dotenv()


def create_app(engine: Optional[Engine] = None, connector: Optional[PlatformConnector] = None) -> FastAPI:
    """Build and wire the FastAPI application.

    The database engine and the host platform connector can be injected;
    otherwise they are built from the environment.
    """
    engine = engine or create_db_engine()
    init_db(engine)

    connector = connector or ConnectorFactory.create_connector("database", {"engine": engine})
    store = Store(engine)
    service_account = ServiceAccount(connector, os.getenv("BOARDS_BOT_USERNAME", DEFAULT_BOT_USERNAME))

    app = FastAPI(title="Boards API")
    app.state.store = store
    app.state.permissions = PermissionService(store, connector)
    app.state.mutations = BatchMutationEngine(store)
    app.state.service_account = service_account
    app.state.notifier = Notifier(connector, service_account)

    app.include_router(boards_and_blocks_router.router)
    logger.info("Boards API ready")
    return app
