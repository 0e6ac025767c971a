"""
Модуль для загрузки и валидации конфигурации приложения.

Параметры берутся из необязательного ini-файла. Если файл не указан,
пути вычисляются от текущего рабочего каталога: исходные файлы лежат
в <cwd>/Raw, архив создается рядом с ним в <родитель cwd>/柠泽.
"""

import configparser
import os
from pathlib import Path
from typing import Optional
from dataclasses import dataclass


RAW_DIR_NAME = "Raw"
ARCHIVE_DIR_NAME = "柠泽"

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


@dataclass
class PathsConfig:
    """Конфигурация путей к файлам."""
    source_dir: Path
    archive_dir: Path


@dataclass
class LoggingConfig:
    """Конфигурация логирования."""
    level: str = 'INFO'
    log_file: Optional[Path] = None
    max_log_size: int = 10
    backup_count: int = 5


@dataclass
class Config:
    """Основная конфигурация приложения."""
    paths: PathsConfig
    logging: LoggingConfig


def default_paths(cwd: Optional[Path] = None) -> PathsConfig:
    """
    Вычисляет пути по умолчанию от рабочего каталога.

    Args:
        cwd: Рабочий каталог (по умолчанию текущий каталог процесса)

    Returns:
        PathsConfig: Пути к исходному каталогу и архиву
    """
    if cwd is None:
        cwd = Path(os.getcwd())
    cwd = Path(cwd)
    return PathsConfig(
        source_dir=cwd / RAW_DIR_NAME,
        archive_dir=cwd.parent / ARCHIVE_DIR_NAME
    )


class ConfigLoader:
    """Класс для загрузки и валидации конфигурации."""

    def __init__(self, config_path: Optional[str] = None, cwd: Optional[Path] = None):
        """
        Инициализация загрузчика конфигурации.

        Args:
            config_path: Путь к файлу конфигурации (None - только значения по умолчанию)
            cwd: Рабочий каталог для вычисления путей по умолчанию
        """
        self.config_path = Path(config_path) if config_path else None
        self.cwd = cwd
        self._config: Optional[Config] = None

    def load_config(self) -> Config:
        """
        Загружает конфигурацию из файла или значений по умолчанию.

        Returns:
            Config: Объект конфигурации

        Raises:
            FileNotFoundError: Если указанный файл конфигурации не найден
            ValueError: Если конфигурация некорректна
        """
        config_parser = configparser.ConfigParser()

        if self.config_path is not None:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Файл конфигурации не найден: {self.config_path}")
            config_parser.read(self.config_path, encoding='utf-8')

        try:
            paths_config = self._load_paths_config(config_parser)
            logging_config = self._load_logging_config(config_parser)

            self._config = Config(
                paths=paths_config,
                logging=logging_config
            )

            self._validate_config()

            return self._config

        except Exception as e:
            raise ValueError(f"Ошибка загрузки конфигурации: {e}")

    def _load_paths_config(self, parser: configparser.ConfigParser) -> PathsConfig:
        """Загружает конфигурацию путей, недостающие значения берутся от cwd."""
        defaults = default_paths(self.cwd)
        section = 'paths'

        if not parser.has_section(section):
            return defaults

        source_dir = parser.get(section, 'source_dir', fallback=None)
        archive_dir = parser.get(section, 'archive_dir', fallback=None)

        return PathsConfig(
            source_dir=Path(source_dir) if source_dir else defaults.source_dir,
            archive_dir=Path(archive_dir) if archive_dir else defaults.archive_dir
        )

    def _load_logging_config(self, parser: configparser.ConfigParser) -> LoggingConfig:
        """Загружает конфигурацию логирования."""
        section = 'logging'

        if not parser.has_section(section):
            return LoggingConfig()

        log_file = parser.get(section, 'log_file', fallback='')

        return LoggingConfig(
            level=parser.get(section, 'level', fallback='INFO'),
            log_file=Path(log_file) if log_file else None,
            max_log_size=parser.getint(section, 'max_log_size', fallback=10),
            backup_count=parser.getint(section, 'backup_count', fallback=5)
        )

    def _validate_config(self) -> None:
        """Валидирует загруженную конфигурацию."""
        if not self._config:
            raise ValueError("Конфигурация не загружена")

        if self._config.paths.source_dir == self._config.paths.archive_dir:
            raise ValueError("Исходный каталог и каталог архива совпадают")

        if self._config.logging.level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"Некорректный уровень логирования: {self._config.logging.level}")

        if self._config.logging.max_log_size <= 0:
            raise ValueError("Размер файла лога должен быть больше 0")

        if self._config.logging.backup_count < 0:
            raise ValueError("Количество резервных копий лога не может быть отрицательным")


def load_config(config_path: Optional[str] = None, cwd: Optional[Path] = None) -> Config:
    """
    Удобная функция для быстрой загрузки конфигурации.

    Args:
        config_path: Путь к файлу конфигурации
        cwd: Рабочий каталог для путей по умолчанию

    Returns:
        Config: Объект конфигурации
    """
    loader = ConfigLoader(config_path, cwd)
    return loader.load_config()
