"""
Модуль для настройки и управления логированием приложения.

Консольный вывод с цветной подсветкой уровней идет в stderr, чтобы
не смешиваться с отчетом о дубликатах. При указании log_file
дополнительно пишется файл с ротацией.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional, Dict
from datetime import datetime

from .config_loader import LoggingConfig


LOGGER_NAME = 'media_archiver'
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ColoredFormatter(logging.Formatter):
    """Форматтер с цветным выводом для консоли."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'
    }

    def format(self, record):
        """Форматирует запись лога с цветом."""
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            # Запись может попасть и в файловый обработчик
            record.levelname = levelname


class ArchiverLogger:
    """Класс для управления логированием архиватора."""

    def __init__(self, config: LoggingConfig):
        """
        Инициализация логгера.

        Args:
            config: Конфигурация логирования
        """
        self.config = config
        self.logger: Optional[logging.Logger] = None
        self._setup_logger()

    def _setup_logger(self) -> None:
        """Настраивает логгер с консольным и, при необходимости, файловым выводом."""
        level = getattr(logging, self.config.level.upper())

        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(level)

        for handler in self.logger.handlers[:]:
            handler.close()
            self.logger.removeHandler(handler)

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(ColoredFormatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        console_handler.setLevel(level)
        self.logger.addHandler(console_handler)

        if self.config.log_file:
            log_file_path = Path(self.config.log_file)
            log_file_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_file_path,
                maxBytes=self.config.max_log_size * 1024 * 1024,  # MB -> байты
                backupCount=self.config.backup_count,
                encoding='utf-8'
            )
            file_handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
            file_handler.setLevel(level)
            self.logger.addHandler(file_handler)

        self.logger.propagate = False

    def close(self) -> None:
        """Закрывает обработчики логгера."""
        for handler in self.logger.handlers[:]:
            handler.close()
            self.logger.removeHandler(handler)

    def log_archive_start(self, source_dir: Path, archive_dir: Path) -> None:
        """
        Логирует начало архивации.

        Args:
            source_dir: Исходный каталог
            archive_dir: Каталог архива
        """
        self.logger.info(f"🚀 Начало архивации")
        self.logger.info(f"📂 Источник: {source_dir}")
        self.logger.info(f"🗃️ Архив: {archive_dir}")
        self.logger.info(f"⏰ Время начала: {datetime.now().strftime(LOG_DATE_FORMAT)}")

    def log_archive_end(self, stats: Dict) -> None:
        """
        Логирует завершение архивации.

        Args:
            stats: Словарь статистики (ArchiveStats.to_dict())
        """
        self.logger.info(f"✅ Архивация завершена")
        self.logger.info(f"📊 Статистика:")
        self.logger.info(f"   • Найдено медиафайлов: {stats.get('scanned_files', 0)}")
        self.logger.info(f"   • Перемещено: {stats.get('archived_files', 0)}")
        self.logger.info(f"   • Дубликатов: {stats.get('duplicate_files', 0)}")
        self.logger.info(f"   • Пропущено с ошибкой: {stats.get('skipped_files', 0)}")
        self.logger.info(f"⏰ Время завершения: {datetime.now().strftime(LOG_DATE_FORMAT)}")

    def log_file_archived(self, name: str, source_path: Path, target_path: Path) -> None:
        """Логирует успешное перемещение файла в архив."""
        self.logger.info(f"📁 Файл {name} перемещен: {source_path} → {target_path}")

    def log_duplicate(self, name: str, relative_path: str) -> None:
        """Логирует найденный дубликат."""
        self.logger.debug(f"♻️ Дубликат {name}: {relative_path} уже существует")

    def log_file_skipped(self, path: Path, reason: str) -> None:
        """
        Логирует пропуск файла.

        Args:
            path: Путь к файлу
            reason: Причина пропуска
        """
        self.logger.warning(f"⏭️ Файл пропущен ({reason}): {path}")

    def log_file_error(self, name: str, error: Exception) -> None:
        """
        Логирует ошибку при обработке файла.

        Args:
            name: Имя или путь файла
            error: Исключение
        """
        self.logger.error(f"❌ Ошибка при обработке файла {name}: {error}")

    def log_config_loaded(self, config_path: Optional[str]) -> None:
        """Логирует загрузку конфигурации."""
        if config_path:
            self.logger.info(f"⚙️ Конфигурация загружена из {config_path}")
        else:
            self.logger.info("⚙️ Используется конфигурация по умолчанию")

    def log_system_info(self, info: str) -> None:
        """Логирует системную информацию."""
        self.logger.info(f"ℹ️ {info}")

    def log_warning(self, message: str) -> None:
        """Логирует предупреждение."""
        self.logger.warning(f"⚠️ {message}")

    def log_critical_error(self, message: str, error: Exception = None) -> None:
        """
        Логирует критическую ошибку.

        Args:
            message: Сообщение об ошибке
            error: Исключение (опционально)
        """
        if error:
            self.logger.critical(f"💥 {message}: {error}")
        else:
            self.logger.critical(f"💥 {message}")
