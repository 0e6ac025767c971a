"""
Модуль для операций с файловой системой.

Содержит правило именования архивных файлов
(YYYY-MM-DD_HHMMSS_<md5>.<ext> в каталоге YYYY-MM) и класс FileOps,
через который архиватор хеширует, создает каталоги и перемещает файлы.
"""

import hashlib
import os
import shutil
from datetime import datetime
from pathlib import Path
from typing import Dict, Union

from .logger import ArchiverLogger


SUPPORTED_EXTENSIONS = frozenset(['jpg', 'jpeg', 'png', 'mp4', 'mov', 'heic'])

DATE_FORMAT = "%Y-%m-%d_%H%M%S"
YEAR_MONTH_LENGTH = 7
HASH_CHUNK_SIZE = 4096
NANOSECONDS = 1_000_000_000


class FileOperationError(Exception):
    """Исключение для ошибок операций с файлами."""
    pass


class HashError(FileOperationError):
    """Не удалось прочитать файл для вычисления хеша."""
    pass


class DirectoryCreationError(FileOperationError):
    """Не удалось создать каталог."""
    pass


class MoveError(FileOperationError):
    """Не удалось переместить файл."""
    pass


def normalize_extension(path: Union[str, Path]) -> str:
    """
    Возвращает расширение файла в нижнем регистре без точки.

    Расширением считается все после последней точки в имени,
    в том числе для имен вида ".jpg".
    """
    name = os.path.basename(str(path))
    dot = name.rfind('.')
    if dot < 0:
        return ''
    return name[dot + 1:].lower()


def is_supported(path: Union[str, Path]) -> bool:
    """Проверяет, входит ли расширение файла в список медиаформатов."""
    return normalize_extension(path) in SUPPORTED_EXTENSIONS


def format_mod_time(mtime_ns: int) -> str:
    """
    Форматирует время модификации (локальное время) как YYYY-MM-DD_HHMMSS.

    Доли секунды отбрасываются, а не округляются.

    Args:
        mtime_ns: st_mtime_ns из os.stat (наносекунды от эпохи)
    """
    return datetime.fromtimestamp(mtime_ns // NANOSECONDS).strftime(DATE_FORMAT)


def year_month(file_date: str) -> str:
    """Возвращает каталог раздела: первые 7 символов даты ("2023-10")."""
    return file_date[:YEAR_MONTH_LENGTH]


def canonical_name(file_date: str, fingerprint: str, extension: str) -> str:
    """Собирает имя архивного файла: дата_хеш.расширение."""
    return f"{file_date}_{fingerprint}.{extension}"


def compute_md5(file_path: Union[str, Path], chunk_size: int = HASH_CHUNK_SIZE) -> str:
    """
    Вычисляет MD5 файла, читая его блоками.

    Args:
        file_path: Путь к файлу
        chunk_size: Размер блока чтения в байтах

    Returns:
        str: Хеш в шестнадцатеричном виде (32 символа)

    Raises:
        OSError: Если файл не удалось открыть или прочитать
    """
    hasher = hashlib.md5()
    with open(file_path, 'rb') as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


class FileOps:
    """Класс для операций с файловой системой."""

    def __init__(self, logger: ArchiverLogger, chunk_size: int = HASH_CHUNK_SIZE):
        """
        Инициализация операций с файлами.

        Args:
            logger: Логгер для записи операций
            chunk_size: Размер блока при вычислении хеша
        """
        self.logger = logger
        self.chunk_size = chunk_size

    def hash_file(self, file_path: Path) -> str:
        """
        Вычисляет отпечаток содержимого файла.

        Raises:
            HashError: Если файл не удалось прочитать
        """
        try:
            return compute_md5(file_path, self.chunk_size)
        except OSError as e:
            self.logger.log_file_error(str(file_path), e)
            raise HashError(f"Ошибка вычисления MD5 файла {file_path}: {e}")

    def ensure_directory(self, directory: Path) -> Path:
        """
        Создает каталог, если он не существует.

        Raises:
            DirectoryCreationError: Если каталог не удалось создать
        """
        try:
            directory.mkdir(parents=True, exist_ok=True)
            return directory
        except OSError as e:
            self.logger.log_file_error(str(directory), e)
            raise DirectoryCreationError(f"Ошибка создания каталога {directory}: {e}")

    def exists(self, path: Path) -> bool:
        """Проверяет, занят ли путь в архиве."""
        return os.path.lexists(path)

    def move_file(self, source_path: Path, target_path: Path) -> Path:
        """
        Перемещает файл в архив.

        В пределах одного тома это атомарное переименование.

        Raises:
            MoveError: Если файл не удалось переместить
        """
        try:
            shutil.move(str(source_path), str(target_path))
            return target_path
        except OSError as e:
            self.logger.log_file_error(str(source_path), e)
            raise MoveError(f"Ошибка перемещения {source_path} в {target_path}: {e}")

    def get_storage_statistics(self, archive_dir: Path) -> Dict:
        """
        Получает статистику архива по разделам год-месяц.

        Returns:
            dict: Количество разделов, файлов и их суммарный размер
        """
        stats = {
            'archive_dir': str(archive_dir),
            'partitions_count': 0,
            'archived_files_count': 0,
            'archived_files_size': 0
        }

        if not archive_dir.is_dir():
            return stats

        for partition in archive_dir.iterdir():
            if not partition.is_dir():
                continue
            stats['partitions_count'] += 1
            for entry in partition.iterdir():
                if entry.is_file():
                    stats['archived_files_count'] += 1
                    stats['archived_files_size'] += entry.stat().st_size

        return stats
