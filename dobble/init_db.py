from sqlmodel import create_engine, SQLModel
from . import models  # noqa: F401  registers tables on SQLModel.metadata
from .logging_utils import get_logger

logger = get_logger("dobble.init_db")


def init_db(path='sqlite:///./dobble.db'):
    engine = create_engine(path, connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)
    logger.info("db_initialized", extra={"path": path})
    return engine


if __name__ == '__main__':
    init_db()
