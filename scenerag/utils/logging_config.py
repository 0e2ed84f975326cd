import sys
from typing import Optional
from loguru import logger


class LoggerManager:
    def __init__(self):
        self.console_sink_id = None
        self.file_sink_id = None

        # Always remove the default handler
        logger.remove()

    def enable_console(self, level: str = "INFO", serialize: bool = False):
        if self.console_sink_id is None:
            self.console_sink_id = logger.add(
                sys.stdout, level=level, colorize=not serialize, serialize=serialize
            )

    def disable_console(self):
        if self.console_sink_id is not None:
            logger.remove(self.console_sink_id)
            self.console_sink_id = None

    def enable_file(self, path: str, level: str = "INFO", rotation: str = "10 MB",
                    retention_days: int = 7, serialize: bool = False):
        if self.file_sink_id is None:
            self.file_sink_id = logger.add(
                path,
                level=level,
                rotation=rotation,
                retention=f"{retention_days} days",
                serialize=serialize,
                enqueue=True,
            )

    def disable_file(self):
        if self.file_sink_id is not None:
            logger.remove(self.file_sink_id)
            self.file_sink_id = None

    def configure(self, logging_config: Optional["LoggingConfig"] = None):
        """Apply a LoggingConfig, replacing any sinks added earlier."""
        from ..config.settings import LoggingConfig

        cfg = logging_config or LoggingConfig()
        self.disable_console()
        self.disable_file()
        self.enable_console(level=cfg.level, serialize=cfg.enable_json)
        if cfg.enable_file_logging and cfg.log_file:
            self.enable_file(
                cfg.log_file,
                level=cfg.level,
                rotation=cfg.max_file_size,
                retention_days=cfg.retention_days,
                serialize=cfg.enable_json,
            )
        return logger

    def get_logger(self):
        return logger


log_manager = LoggerManager()
