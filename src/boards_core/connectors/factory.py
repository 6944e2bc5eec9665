# connectors/factory.py
from typing import Dict

from boards_core.connectors.base import PlatformConnector
from boards_core.connectors.database_connector import DatabaseConnector


class ConnectorFactory:
    @staticmethod
    def create_connector(source_type: str, config: Dict) -> PlatformConnector:
        if source_type == "database":
            return DatabaseConnector(config["engine"])
        else:
            raise ValueError(f"Unsupported source type: {source_type}")
