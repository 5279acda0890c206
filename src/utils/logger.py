import logging
import sys
from logging.handlers import RotatingFileHandler
from config import LOG_FILE

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5


def _build_handlers(log_file, console):
    handlers = [RotatingFileHandler(log_file, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT, encoding='utf-8')]
    if console:
        handlers.append(logging.StreamHandler(sys.stdout))
    return handlers


def setup_logger(name="product_costing", level=logging.INFO, log_file=None, console=True):
    """
    配置成本计算日志
    name 为 None 时配置 root logger，模块内的 logging.getLogger(__name__) 会向上传递
    重复调用只更新级别，不重复添加 handler
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in _build_handlers(log_file or LOG_FILE, console):
        handler.setFormatter(formatter)
        handler.setLevel(level)
        logger.addHandler(handler)

    return logger
