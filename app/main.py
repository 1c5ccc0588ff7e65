# IT资产台账与凭据管理系统 - 应用入口文件
#
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from dotenv import load_dotenv

# 首先加载环境变量
load_dotenv()

from app.core.config import settings
from app.api.v1.routers import api_router
from app.core.exceptions import InventoryError
from app.core.logging_config import setup_logging, get_logger
from app.middleware.logging_middleware import LoggingMiddleware

# 初始化日志
setup_logging()
logger = get_logger(__name__)
from app.db.session import engine, Base
from app import models  # noqa: F401  导入所有模型


# 数据库初始化
def create_database_if_not_exists():
    """自动创建MySQL数据库（如果不存在）；SQLite 由驱动自动创建文件"""
    if not settings.SQLALCHEMY_DATABASE_URI.startswith("mysql"):
        return

    import pymysql

    try:
        # 连接MySQL服务器（不指定数据库）
        connection = pymysql.connect(
            host=settings.MYSQL_HOST,
            port=settings.MYSQL_PORT,
            user=settings.MYSQL_USER,
            password=settings.MYSQL_PASSWORD,
            charset='utf8mb4'
        )
        try:
            with connection.cursor() as cursor:
                cursor.execute("SHOW DATABASES LIKE %s", (settings.MYSQL_DB,))
                if cursor.fetchone():
                    logger.info("Database '%s' already exists", settings.MYSQL_DB)
                else:
                    cursor.execute(
                        f"CREATE DATABASE `{settings.MYSQL_DB}` "
                        f"CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
                    )
                    logger.info("Database '%s' created successfully", settings.MYSQL_DB)
        finally:
            connection.close()
    except pymysql.MySQLError as e:
        logger.warning("Failed to check/create database: %s; assuming it exists", e)


def create_tables():
    """创建数据库表"""
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    logger.info("Application starting up...")
    create_database_if_not_exists()
    create_tables()
    yield
    logger.info("Application shutting down...")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="IT资产台账与凭据管理系统 - 硬件、网络设备、通用库存、VLAN、凭据与分配记录",
    lifespan=lifespan,
    default_response_class=ORJSONResponse,
)


# =====================================================
# 全局异常处理器 - 统一错误响应格式 {"message": ...}
# =====================================================

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """请求参数验证失败：400，逐字段列出错误"""
    errors = []
    for error in exc.errors():
        loc = [str(x) for x in error.get("loc", []) if x not in ("body", "query", "path", "header")]
        errors.append({"field": ".".join(loc), "message": error.get("msg", "")})

    return ORJSONResponse(
        status_code=400,
        content={"message": "Validation failed", "errors": errors},
    )


@app.exception_handler(InventoryError)
async def inventory_exception_handler(request: Request, exc: InventoryError):
    """业务异常：按异常类型映射状态码"""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return ORJSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """处理HTTP异常，返回统一格式"""
    return ORJSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """未预期异常：记录堆栈，返回500"""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return ORJSONResponse(status_code=500, content={"message": "Internal server error"})


# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_CREDENTIALS,
    allow_methods=settings.CORS_METHODS,
    allow_headers=settings.CORS_HEADERS,
)

# Add logging middleware
app.add_middleware(LoggingMiddleware)

# Include API router
app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/")
async def welcome():
    return {
        "message": f"Welcome to {settings.PROJECT_NAME}",
        "docs": "/docs",
        "version": settings.VERSION,
    }


@app.get("/health")
async def health_check():
    """健康检查接口"""
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
