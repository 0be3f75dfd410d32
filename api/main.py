# api/main.py

import logging
import os
from fastapi import FastAPI
from sqlalchemy import create_engine

from skill_system.goals import GoalStateManager
from skill_system.storage import GoalStore
from .crud import SqlGoalStore
from .routers import goals, skills
import api.database  # To access and re-assign api.database.engine


def create_app(goal_store: GoalStore = None):
    # Initialize the database engine here, ensuring it uses the
    # environment variables set by pytest_configure for tests.
    logging.basicConfig(level=api.database.LOG_LEVEL)

    if goal_store is None:
        DATABASE_URL = os.getenv("DATABASE_URL")
        if not DATABASE_URL:
            raise RuntimeError("DATABASE_URL environment variable not set at app creation time.")

        # Re-assign the engine in the database module so init_db and the
        # store share it.
        api.database.engine = create_engine(DATABASE_URL)
        goal_store = SqlGoalStore(api.database.engine)

    app = FastAPI(
        title="SkillForge Goals API",
        description="Goal pathfinding and progress tracking over a skill prerequisite graph.",
        version="0.2.0",
    )

    # One registry for every (namespace, subject) key served by this app
    app.state.goal_manager = GoalStateManager(goal_store)

    app.include_router(goals.router)
    app.include_router(skills.router)

    # Also expose the same routes under /api for the frontend
    api_prefix = "/api"
    app.include_router(goals.router, prefix=api_prefix)
    app.include_router(skills.router, prefix=api_prefix)

    return app


# For production, uvicorn can be told to use the factory: uvicorn api.main:create_app --factory
