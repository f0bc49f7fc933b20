from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from linkhub_app.config import settings


# SQLite needs check_same_thread=False because FastAPI runs sync routes in a threadpool
connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(settings.database_url, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Yield a database session per request and close it afterwards"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
