import logging

logger = logging.getLogger(__name__)


def log_request(method: str, path: str, status_code: int) -> None:
    """Simple request logging"""
    logger.info(f"{method} {path} -> {status_code}")


def log_error(error: str, method: str, path: str) -> None:
    """Simple error logging"""
    logger.error(f"Error in {method} {path}: {error}")
