import pymysql
from pymysql.cursors import DictCursor
import os
from dotenv import load_dotenv
import urllib.parse
import traceback
load_dotenv()

# Database configuration (env defaults)
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_USER = os.getenv("DB_USER", "root")
DB_PASSWORD = os.getenv("DB_PASSWORD", "")
DB_NAME = os.getenv("DB_NAME", "rrhh")
DB_PORT = int(os.getenv("DB_PORT", 3306))

# ---------------------------------------------------------------------------
# SQLAlchemy Configuration for ORM Models
# ---------------------------------------------------------------------------
from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from sqlalchemy.pool import StaticPool
from typing import Generator
import importlib
import logging

logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)

password_enc = urllib.parse.quote_plus(DB_PASSWORD)
SQLALCHEMY_DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"mysql+pymysql://{DB_USER}:{password_enc}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        # a single shared connection so in-memory databases survive across sessions
        return {
            "echo": False,
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    return {
        "echo": False,
        "pool_size": 10,
        "max_overflow": 20,
        "pool_pre_ping": True,
    }


engine = create_engine(SQLALCHEMY_DATABASE_URL, **_engine_kwargs(SQLALCHEMY_DATABASE_URL))

Base = declarative_base()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def uses_mysql() -> bool:
    return engine.dialect.name == "mysql"


# ---------------------------------------------------------------------------
# pymysql direct helpers
# ---------------------------------------------------------------------------

def get_db_connection(use_db=True):
    """Create and return a database connection"""
    conn_params = dict(
        host=DB_HOST,
        user=DB_USER,
        password=DB_PASSWORD,
        port=DB_PORT,
        cursorclass=DictCursor,
        autocommit=False
    )
    if use_db:
        conn_params["database"] = DB_NAME
    return pymysql.connect(**conn_params)


# ---------------------------------------------------------------------------
# init_db: Create database and ORM tables
# ---------------------------------------------------------------------------

def ensure_database():
    """
    Create the MySQL database if it does not exist yet.
    Connects without selecting a database, so it works on a fresh server.
    """
    try:
        conn = get_db_connection(use_db=False)
    except Exception:
        logger.error("ERROR: Could not connect to MySQL server to create database.")
        logger.error(traceback.format_exc())
        return False

    try:
        with conn.cursor() as cur:
            try:
                cur.execute(
                    f"CREATE DATABASE IF NOT EXISTS `{DB_NAME}` "
                    "DEFAULT CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
                )
                conn.commit()
                logger.info(f"Database `{DB_NAME}` ensured.")
            except Exception:
                logger.error(f"ERROR: Could not create database `{DB_NAME}`.")
                logger.error(traceback.format_exc())
                conn.rollback()
                return False
    finally:
        try:
            conn.close()
        except Exception:
            logger.debug("Could not close bootstrap connection", exc_info=True)
    return True


def init_db():
    # 1) Create database if missing (MySQL only; sqlite creates on connect)
    if uses_mysql() and not ensure_database():
        return

    # 2) Import all SQLAlchemy models so Base.metadata knows the schema
    model_modules = [
        # keep these in sync with files inside app/models
        "employee_model",
    ]
    for mod in model_modules:
        try:
            importlib.import_module(f"app.models.{mod}")
        except Exception:
            logger.warning(f"Warning: could not import app.models.{mod}")
            logger.debug(traceback.format_exc())

    # 3) Create tables
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Base.metadata.create_all() executed.")
    except Exception:
        logger.warning("Warning: Base.metadata.create_all failed:")
        logger.debug(traceback.format_exc())
        return

    tables = inspect(engine).get_table_names()
    logger.info(f"Existing tables after create_all: {tables}")
    if "empleados" not in tables:
        logger.warning("`empleados` table not present after create_all().")
