# api/database.py

import os
from pathlib import Path
from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

from sqlalchemy import (
    create_engine,
    MetaData,
    Table,
    Column,
    String,
    Text,
    func,
    TIMESTAMP,
)
from sqlalchemy.engine import Engine
from neo4j import GraphDatabase, Driver, Session as Neo4jSession

DATABASE_URL = os.getenv("DATABASE_URL")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

engine: Engine = create_engine(DATABASE_URL) if DATABASE_URL else None
metadata = MetaData()

# One row per (namespace, subject) goal; the key is built by skill_system.storage.storage_key
goal_records = Table(
    "goal_records",
    metadata,
    Column("key", String, primary_key=True),
    Column("value", Text, nullable=False),
    Column("updated_at", TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
)


# neo4J

NEO4J_URI = os.getenv("NEO4J_URI")
NEO4J_USERNAME = os.getenv("NEO4J_USERNAME")
NEO4J_PASSWORD = os.getenv("NEO4J_PASSWORD")


# This class will manage the driver instance
class GraphDatabaseManager:
    def __init__(self):
        self.driver: Driver = None

    def connect(self):
        """Establishes the connection to the Neo4j database."""
        for name, value in (
            ("NEO4J_URI", NEO4J_URI),
            ("NEO4J_USERNAME", NEO4J_USERNAME),
            ("NEO4J_PASSWORD", NEO4J_PASSWORD),
        ):
            if not value:
                raise ValueError(
                    f"Missing {name} environment variable. Cannot connect to Neo4j."
                )
        self.driver = GraphDatabase.driver(
            NEO4J_URI, auth=(NEO4J_USERNAME, NEO4J_PASSWORD)
        )

    def close(self):
        """Closes the connection."""
        if self.driver is not None:
            self.driver.close()
            self.driver = None


# Create a single instance of the manager for the application's lifecycle
graph_db_manager = GraphDatabaseManager()


# FastAPI dependency to get the database driver
def get_graph_db_driver() -> Driver:
    if graph_db_manager.driver is None:
        graph_db_manager.connect()
    return graph_db_manager.driver


GraphDBSession = Neo4jSession


# FastAPI dependency to get a Neo4j session
def get_graph_db_session() -> GraphDBSession:
    driver = get_graph_db_driver()
    with driver.session() as session:
        yield session
