from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from app.core.config import settings

SQLALCHEMY_DATABASE_URI = settings.SQLALCHEMY_DATABASE_URI

if SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
    # SQLite 连接会跨线程使用（FastAPI 同步路由运行在线程池中）
    engine = create_engine(
        SQLALCHEMY_DATABASE_URI,
        connect_args={"check_same_thread": False},
        echo=False,
    )
else:
    # 优化连接池配置，防止连接泄漏和死锁
    engine = create_engine(
        SQLALCHEMY_DATABASE_URI,
        pool_pre_ping=True,          # 使用前检查连接是否有效
        pool_size=10,
        max_overflow=20,
        pool_recycle=3600,           # 1小时后回收连接（防止MySQL 8小时超时）
        pool_timeout=30,
        echo=False,
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# 依赖注入函数
def get_db():
    """获取数据库会话"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
