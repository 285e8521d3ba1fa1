from giphyblock.db.engine import dispose_engine, get_engine, get_session_factory, init_engine
from giphyblock.db.models import Base

__all__ = ["Base", "dispose_engine", "get_engine", "get_session_factory", "init_engine"]
