import logging
from pathlib import Path
from typing import Optional

def setup_logging(log_file: Optional[Path] = None, level: str = "INFO"):
    """Configure logging for the command line tools"""
    log_file = Path(log_file or "logs/productivity_analytics.log")
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()  # Also log to console
        ]
    )

    logger = logging.getLogger(__name__)
    logger.debug(f"Logging initialized, writing to {log_file}")
