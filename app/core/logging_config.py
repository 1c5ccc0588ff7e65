"""
日志配置模块

提供结构化日志输出，支持输出到控制台、文本文件和JSON文件
"""

import logging
import sys
from datetime import datetime
from pythonjsonlogger import jsonlogger

from app.core.config import settings

LOG_LEVEL = getattr(logging, settings.LOG_LEVEL, logging.INFO)


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """自定义JSON日志格式化器 - 业务操作日志字段"""

    def add_fields(self, log_record, record, message_dict):
        super(CustomJsonFormatter, self).add_fields(log_record, record, message_dict)

        log_record['logType'] = 'business'
        log_record['source'] = 'itam'
        log_record['level'] = record.levelname
        log_record['logger'] = record.name

        if not log_record.get('operationTime'):
            log_record['operationTime'] = datetime.utcnow().strftime('%Y-%m-%dT%H:%M:%S.%fZ')

        # 业务字段由 log_helper.log_operation 通过 extra 传入
        log_record['operationObject'] = log_record.get('operationObject', '')
        log_record['operationType'] = log_record.get('operationType', '')
        log_record['operator'] = log_record.get('operator', 'system')
        log_record['result'] = log_record.get('result', 'success')

        for key in ('pathname', 'filename', 'lineno', 'funcName', 'created', 'msecs',
                    'relativeCreated', 'thread', 'threadName', 'processName', 'process'):
            log_record.pop(key, None)


def setup_logging():
    """设置日志配置"""

    logger = logging.getLogger()
    logger.setLevel(LOG_LEVEL)

    # 清除已有的处理器
    logger.handlers.clear()

    # 1. 控制台处理器
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(LOG_LEVEL)
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    logger.addHandler(console_handler)

    if settings.LOG_TO_FILE:
        log_dir = settings.LOG_DIR
        log_dir.mkdir(parents=True, exist_ok=True)
        today = datetime.now().strftime("%Y%m%d")

        # 2. JSON文件处理器（结构化日志）
        json_file_handler = logging.FileHandler(log_dir / f'app_{today}.json.log', encoding='utf-8')
        json_file_handler.setLevel(LOG_LEVEL)
        json_file_handler.setFormatter(CustomJsonFormatter('%(message)s'))
        logger.addHandler(json_file_handler)

        # 3. 普通文件处理器（便于人工查看）
        text_file_handler = logging.FileHandler(log_dir / f'app_{today}.log', encoding='utf-8')
        text_file_handler.setLevel(LOG_LEVEL)
        text_file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(text_file_handler)

    # 设置第三方库的日志级别（避免过多日志）
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return logger


def get_logger(name: str = None):
    """获取日志记录器"""
    return logging.getLogger(name or __name__)
