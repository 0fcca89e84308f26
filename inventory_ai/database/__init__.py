from inventory_ai.database.base import Base
from inventory_ai.database.engine import build_engine, engine
from inventory_ai.database.session import SessionLocal, build_session_factory

__all__ = ["Base", "SessionLocal", "build_engine", "build_session_factory", "engine"]
