"""
Модуль бизнес-логики архивации медиафайлов.

Рекурсивно обходит исходный каталог, для каждого медиафайла вычисляет
MD5, строит имя YYYY-MM-DD_HHMMSS_<md5>.<ext> и перемещает файл в раздел
архива YYYY-MM. Если файл с таким именем уже есть в архиве, исходный
файл остается на месте и попадает в список дубликатов.

Ошибки отдельного файла (чтение, создание раздела, перемещение) не
прерывают обход. Отсутствующий исходный каталог, невозможность создать
архив и ошибки обхода каталогов прерывают весь запуск.
"""

import os
import stat
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from .logger import ArchiverLogger
from .file_ops import (
    FileOps,
    HashError,
    DirectoryCreationError,
    MoveError,
    normalize_extension,
    is_supported,
    format_mod_time,
    year_month,
    canonical_name,
)


class ArchiveError(Exception):
    """Исключение для ошибок, прерывающих архивацию."""
    pass


class SourceDirectoryError(ArchiveError):
    """Исходный каталог не существует или не является каталогом."""
    pass


class ArchiveDirectoryError(ArchiveError):
    """Не удалось создать корневой каталог архива."""
    pass


class TraversalError(ArchiveError):
    """Ошибка при обходе исходного каталога."""
    pass


class OutcomeStatus(Enum):
    """Результат обработки одного файла."""
    ARCHIVED = 'archived'
    DUPLICATE = 'duplicate'
    SKIPPED = 'skipped'


class SkipReason(Enum):
    """Причина пропуска файла."""
    HASH_FAILED = 'hash_failed'
    MKDIR_FAILED = 'mkdir_failed'
    MOVE_FAILED = 'move_failed'


@dataclass
class SourceFile:
    """Медиафайл, найденный при обходе исходного каталога."""
    path: Path
    mod_time_ns: int
    extension: str

    @property
    def name(self) -> str:
        return self.path.name


@dataclass
class DuplicateRecord:
    """Файл, для которого в архиве уже есть файл с тем же именем."""
    name: str
    relative_path: str

    def __str__(self) -> str:
        return f"{self.name} => {self.relative_path}"


@dataclass
class ArchiveOutcome:
    """Итог классификации одного файла."""
    status: OutcomeStatus
    source: SourceFile
    target: Optional[Path] = None
    duplicate: Optional[DuplicateRecord] = None
    reason: Optional[str] = None
    error: Optional[Exception] = None


class ArchiveStats:
    """Класс для хранения статистики архивации."""

    def __init__(self):
        self.scanned_files = 0
        self.archived_files = 0
        self.duplicate_files = 0
        self.skipped_files = 0
        self.ignored_files = 0
        self.start_time = None
        self.end_time = None
        self.duplicates: List[DuplicateRecord] = []
        self.errors: List[Dict] = []

    def add_error(self, file_path: Path, reason: str, error: Exception):
        """Добавляет ошибку в список."""
        self.errors.append({
            'file': str(file_path),
            'reason': reason,
            'error': str(error),
            'timestamp': datetime.now()
        })

    def record(self, outcome: ArchiveOutcome) -> None:
        """Учитывает результат обработки файла."""
        if outcome.status is OutcomeStatus.ARCHIVED:
            self.archived_files += 1
        elif outcome.status is OutcomeStatus.DUPLICATE:
            self.duplicate_files += 1
            self.duplicates.append(outcome.duplicate)
        else:
            self.skipped_files += 1
            self.add_error(outcome.source.path, outcome.reason, outcome.error)

    def get_duration(self) -> Optional[float]:
        """Возвращает продолжительность архивации в секундах."""
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None

    def to_dict(self) -> Dict:
        """Преобразует статистику в словарь."""
        return {
            'scanned_files': self.scanned_files,
            'archived_files': self.archived_files,
            'duplicate_files': self.duplicate_files,
            'skipped_files': self.skipped_files,
            'ignored_files': self.ignored_files,
            'start_time': self.start_time.isoformat() if self.start_time else None,
            'end_time': self.end_time.isoformat() if self.end_time else None,
            'duration_seconds': self.get_duration(),
            'error_count': len(self.errors)
        }


def relative_to_archive_parent(target_path: Path, archive_dir: Path) -> str:
    """Путь в архиве относительно каталога, в котором лежит архив."""
    return os.path.relpath(str(target_path), str(archive_dir.parent))


class Archiver:
    """Основной класс архивации медиафайлов."""

    def __init__(self, logger: ArchiverLogger, file_ops: Optional[FileOps] = None):
        """
        Инициализация архиватора.

        Args:
            logger: Логгер для записи операций
            file_ops: Операции с файловой системой (по умолчанию FileOps)
        """
        self.logger = logger
        self.file_ops = file_ops if file_ops is not None else FileOps(logger)
        self.stats = ArchiveStats()

    def prepare(self, source_dir: Path, archive_dir: Path) -> None:
        """
        Проверяет исходный каталог и создает корень архива.

        Raises:
            SourceDirectoryError: Если исходный каталог отсутствует
            ArchiveDirectoryError: Если каталог архива не удалось создать
        """
        if not source_dir.is_dir():
            raise SourceDirectoryError(f"Путь {source_dir} не существует или не является каталогом")

        try:
            archive_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ArchiveDirectoryError(f"Не удалось создать каталог архива {archive_dir}: {e}")

    def scan(self, source_dir: Path, archive_dir: Optional[Path] = None) -> Iterator[SourceFile]:
        """
        Обходит исходный каталог и возвращает поддерживаемые медиафайлы.

        Каталоги и файлы обходятся в лексикографическом порядке. Файлы
        с неподдерживаемым расширением и не обычные файлы (ссылки,
        устройства) только подсчитываются.

        Raises:
            TraversalError: Если каталог или файл не удалось прочитать при обходе
        """
        def on_error(error: OSError):
            raise TraversalError(f"Ошибка обхода каталога {error.filename}: {error}") from error

        skip_dir = os.path.abspath(str(archive_dir)) if archive_dir is not None else None

        for root, dirs, files in os.walk(str(source_dir), onerror=on_error):
            dirs[:] = sorted(d for d in dirs if os.path.abspath(os.path.join(root, d)) != skip_dir)

            for name in sorted(files):
                if not is_supported(name):
                    self.stats.ignored_files += 1
                    continue

                path = Path(root) / name
                try:
                    file_stat = path.lstat()
                except OSError as e:
                    raise TraversalError(f"Ошибка чтения атрибутов файла {path}: {e}") from e

                if not stat.S_ISREG(file_stat.st_mode):
                    self.stats.ignored_files += 1
                    continue

                yield SourceFile(
                    path=path,
                    mod_time_ns=file_stat.st_mtime_ns,
                    extension=normalize_extension(name)
                )

    def classify(self, source_file: SourceFile, archive_dir: Path) -> ArchiveOutcome:
        """
        Обрабатывает один файл и возвращает результат.

        Файловая система затрагивается только через self.file_ops.

        Args:
            source_file: Найденный медиафайл
            archive_dir: Корень архива

        Returns:
            ArchiveOutcome: ARCHIVED, DUPLICATE или SKIPPED с причиной
        """
        file_date = format_mod_time(source_file.mod_time_ns)

        try:
            fingerprint = self.file_ops.hash_file(source_file.path)
        except HashError as e:
            return ArchiveOutcome(OutcomeStatus.SKIPPED, source_file,
                                  reason=SkipReason.HASH_FAILED, error=e)

        target_dir = archive_dir / year_month(file_date)
        target_path = target_dir / canonical_name(file_date, fingerprint, source_file.extension)

        try:
            self.file_ops.ensure_directory(target_dir)
        except DirectoryCreationError as e:
            return ArchiveOutcome(OutcomeStatus.SKIPPED, source_file, target=target_path,
                                  reason=SkipReason.MKDIR_FAILED, error=e)

        # Совпадение имени считается дубликатом без сравнения содержимого
        if self.file_ops.exists(target_path):
            duplicate = DuplicateRecord(
                name=source_file.name,
                relative_path=relative_to_archive_parent(target_path, archive_dir)
            )
            return ArchiveOutcome(OutcomeStatus.DUPLICATE, source_file, target=target_path,
                                  duplicate=duplicate)

        try:
            self.file_ops.move_file(source_file.path, target_path)
        except MoveError as e:
            return ArchiveOutcome(OutcomeStatus.SKIPPED, source_file, target=target_path,
                                  reason=SkipReason.MOVE_FAILED, error=e)

        return ArchiveOutcome(OutcomeStatus.ARCHIVED, source_file, target=target_path)

    def _log_outcome(self, outcome: ArchiveOutcome) -> None:
        if outcome.status is OutcomeStatus.ARCHIVED:
            self.logger.log_file_archived(outcome.source.name, outcome.source.path, outcome.target)
        elif outcome.status is OutcomeStatus.DUPLICATE:
            self.logger.log_duplicate(outcome.duplicate.name, outcome.duplicate.relative_path)
        else:
            self.logger.log_file_skipped(outcome.source.path, outcome.reason.value)

    def archive(self, source_dir: Path, archive_dir: Path) -> ArchiveStats:
        """
        Архивирует все медиафайлы из source_dir в archive_dir.

        Args:
            source_dir: Исходный каталог
            archive_dir: Корень архива

        Returns:
            ArchiveStats: Статистика запуска, включая список дубликатов

        Raises:
            ArchiveError: При ошибке, прерывающей архивацию
        """
        source_dir = Path(source_dir)
        archive_dir = Path(archive_dir)

        self.stats = ArchiveStats()
        self.stats.start_time = datetime.now()

        try:
            self.prepare(source_dir, archive_dir)
            self.logger.log_archive_start(source_dir, archive_dir)

            for source_file in self.scan(source_dir, archive_dir):
                self.stats.scanned_files += 1
                outcome = self.classify(source_file, archive_dir)
                self.stats.record(outcome)
                self._log_outcome(outcome)

        except ArchiveError as e:
            self.logger.log_critical_error("Архивация прервана", e)
            raise
        finally:
            self.stats.end_time = datetime.now()

        self.logger.log_archive_end(self.stats.to_dict())
        return self.stats


def create_archiver(logger: ArchiverLogger) -> Archiver:
    """
    Удобная функция для создания архиватора.

    Args:
        logger: Логгер

    Returns:
        Archiver: Объект архиватора
    """
    return Archiver(logger)
