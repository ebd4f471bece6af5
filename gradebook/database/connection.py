# 数据库连接配置
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
import os
import logging
from typing import Generator

# 日志配置
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# 数据库连接配置，默认使用本地SQLite
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./gradebook.db")
DATABASE_ECHO = os.getenv("DATABASE_ECHO", "false").lower() in ("1", "true", "yes")


def build_engine(database_url: str = DATABASE_URL, echo: bool = DATABASE_ECHO):
    """创建数据库引擎"""
    options = {
        "pool_pre_ping": True,           # 连接健康检查
        "echo": echo,
        "future": True,
    }
    if database_url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
    else:
        options.update({
            "pool_size": 10,             # 连接池大小
            "max_overflow": 20,          # 最大溢出连接
            "pool_recycle": 3600,        # 连接回收时间(1小时)
        })
    return create_engine(database_url, **options)


# 创建数据库引擎
engine = build_engine()

# 创建会话工厂
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    future=True
)

# 创建声明性基类
Base = declarative_base()


def get_db() -> Generator:
    """获取数据库会话"""
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error(f"Database session error: {str(e)}")
        db.rollback()
        raise
    finally:
        db.close()


def check_connection() -> bool:
    """测试数据库连接"""
    try:
        from sqlalchemy import text
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
            logger.info("Database connection successful")
            return True
    except Exception as e:
        logger.error(f"Database connection failed: {str(e)}")
        return False


def create_tables(bind=None):
    """创建所有表"""
    # 导入模型以注册到元数据
    from . import models  # noqa: F401
    try:
        Base.metadata.create_all(bind=bind or engine)
        logger.info("All tables created successfully")
    except Exception as e:
        logger.error(f"Failed to create tables: {str(e)}")
        raise
