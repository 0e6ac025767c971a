"""
Тесты для модуля file_ops.py
"""

import os
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from unittest.mock import Mock

import pytest

from media_archiver.file_ops import (
    FileOps,
    HashError,
    DirectoryCreationError,
    MoveError,
    FileOperationError,
    normalize_extension,
    is_supported,
    format_mod_time,
    year_month,
    canonical_name,
    compute_md5,
    NANOSECONDS,
)
from media_archiver.logger import ArchiverLogger


ABC_MD5 = "902fbdd2b1df0c4f70b4a5d23525e932"


class TestNamingPolicy:
    """Тесты для правила именования архивных файлов."""

    @pytest.mark.parametrize("name, expected", [
        ("photo.JPG", "jpg"),
        ("clip.Mov", "mov"),
        ("archive.tar.HEIC", "heic"),
        ("README", ""),
        (".jpg", "jpg"),
        ("dir/sub/image.png", "png"),
    ])
    def test_normalize_extension(self, name, expected):
        """Тест нормализации расширения."""
        assert normalize_extension(name) == expected

    def test_is_supported(self):
        """Тест проверки поддерживаемых форматов."""
        for name in ["a.jpg", "a.JPEG", "a.png", "a.mp4", "a.MOV", "a.heic"]:
            assert is_supported(name)

        for name in ["a.txt", "a.gif", "a.jpg.bak", "jpg"]:
            assert not is_supported(name)

    def test_format_mod_time(self):
        """Тест форматирования времени модификации."""
        mtime_ns = int(datetime(2023, 10, 5, 14, 30, 0).timestamp()) * NANOSECONDS
        assert format_mod_time(mtime_ns) == "2023-10-05_143000"

    def test_format_mod_time_drops_fraction(self):
        """Тест отбрасывания долей секунды."""
        mtime_ns = int(datetime(2024, 1, 15, 10, 30, 59).timestamp()) * NANOSECONDS + 750_000_000
        assert format_mod_time(mtime_ns) == "2024-01-15_103059"

    def test_format_mod_time_does_not_round_up(self):
        """Тест: 14:30:00.9999999 остается в секунде 14:30:00."""
        mtime_ns = int(datetime(2023, 10, 5, 14, 30, 0).timestamp()) * NANOSECONDS + 999_999_900
        assert format_mod_time(mtime_ns) == "2023-10-05_143000"

    def test_format_mod_time_end_of_month(self):
        """Тест: последняя доля секунды месяца не переносит файл в следующий раздел."""
        mtime_ns = int(datetime(2023, 10, 31, 23, 59, 59).timestamp()) * NANOSECONDS + 999_999_999
        file_date = format_mod_time(mtime_ns)

        assert file_date == "2023-10-31_235959"
        assert year_month(file_date) == "2023-10"

    def test_year_month(self):
        """Тест получения раздела год-месяц."""
        assert year_month("2023-10-05_143000") == "2023-10"

    def test_canonical_name(self):
        """Тест сборки имени архивного файла."""
        name = canonical_name("2023-10-05_143000", ABC_MD5, "jpg")
        assert name == f"2023-10-05_143000_{ABC_MD5}.jpg"


class TestComputeMd5:
    """Тесты для функции compute_md5."""

    @pytest.fixture
    def temp_dir(self):
        """Создает временную директорию для тестов."""
        temp_path = tempfile.mkdtemp()
        yield Path(temp_path)
        shutil.rmtree(temp_path, ignore_errors=True)

    def test_known_digest(self, temp_dir):
        """Тест известного значения MD5."""
        test_file = temp_dir / "photo.JPG"
        test_file.write_bytes(b"ABC")

        assert compute_md5(test_file) == ABC_MD5

    def test_small_chunks_give_same_digest(self, temp_dir):
        """Тест независимости хеша от размера блока."""
        test_file = temp_dir / "video.mp4"
        test_file.write_bytes(os.urandom(10000))

        assert compute_md5(test_file, chunk_size=7) == compute_md5(test_file)

    def test_empty_file(self, temp_dir):
        """Тест хеша пустого файла."""
        test_file = temp_dir / "empty.png"
        test_file.write_bytes(b"")

        assert compute_md5(test_file) == "d41d8cd98f00b204e9800998ecf8427e"

    def test_missing_file(self, temp_dir):
        """Тест ошибки при отсутствии файла."""
        with pytest.raises(OSError):
            compute_md5(temp_dir / "nonexistent.jpg")


class TestFileOps:
    """Тесты для класса FileOps."""

    @pytest.fixture
    def temp_dir(self):
        """Создает временную директорию для тестов."""
        temp_path = tempfile.mkdtemp()
        yield Path(temp_path)
        shutil.rmtree(temp_path, ignore_errors=True)

    @pytest.fixture
    def mock_logger(self):
        """Создает мок логгера."""
        return Mock(spec=ArchiverLogger)

    @pytest.fixture
    def file_ops(self, mock_logger):
        """Создает объект FileOps для тестов."""
        return FileOps(mock_logger)

    def test_hash_file(self, file_ops, temp_dir):
        """Тест вычисления отпечатка файла."""
        test_file = temp_dir / "photo.jpg"
        test_file.write_bytes(b"ABC")

        assert file_ops.hash_file(test_file) == ABC_MD5
        file_ops.logger.log_file_error.assert_not_called()

    def test_hash_file_not_found(self, file_ops, temp_dir):
        """Тест ошибки хеширования несуществующего файла."""
        with pytest.raises(HashError):
            file_ops.hash_file(temp_dir / "nonexistent.jpg")

        file_ops.logger.log_file_error.assert_called_once()

    def test_hash_error_is_file_operation_error(self):
        """Тест иерархии исключений."""
        assert issubclass(HashError, FileOperationError)
        assert issubclass(DirectoryCreationError, FileOperationError)
        assert issubclass(MoveError, FileOperationError)

    def test_ensure_directory(self, file_ops, temp_dir):
        """Тест создания каталога."""
        target = temp_dir / "archive" / "2023-10"

        assert file_ops.ensure_directory(target) == target
        assert target.is_dir()

        # Повторный вызов не падает
        assert file_ops.ensure_directory(target) == target

    def test_ensure_directory_failure(self, file_ops, temp_dir):
        """Тест ошибки создания каталога поверх файла."""
        blocker = temp_dir / "2023-10"
        blocker.write_text("not a directory")

        with pytest.raises(DirectoryCreationError):
            file_ops.ensure_directory(blocker / "nested")

        file_ops.logger.log_file_error.assert_called_once()

    def test_exists(self, file_ops, temp_dir):
        """Тест проверки занятости пути."""
        test_file = temp_dir / "photo.jpg"
        assert not file_ops.exists(test_file)

        test_file.write_bytes(b"ABC")
        assert file_ops.exists(test_file)

    def test_move_file(self, file_ops, temp_dir):
        """Тест перемещения файла."""
        source = temp_dir / "photo.jpg"
        source.write_bytes(b"ABC")
        target_dir = temp_dir / "archive"
        target_dir.mkdir()
        target = target_dir / "renamed.jpg"

        result = file_ops.move_file(source, target)

        assert result == target
        assert not source.exists()
        assert target.read_bytes() == b"ABC"

    def test_move_file_missing_source(self, file_ops, temp_dir):
        """Тест ошибки перемещения несуществующего файла."""
        with pytest.raises(MoveError):
            file_ops.move_file(temp_dir / "nonexistent.jpg", temp_dir / "target.jpg")

        file_ops.logger.log_file_error.assert_called_once()

    def test_get_storage_statistics(self, file_ops, temp_dir):
        """Тест статистики архива."""
        archive = temp_dir / "archive"
        (archive / "2023-10").mkdir(parents=True)
        (archive / "2023-11").mkdir()
        (archive / "2023-10" / "a.jpg").write_bytes(b"12345")
        (archive / "2023-11" / "b.mp4").write_bytes(b"123")
        (archive / "stray.txt").write_text("ignored")

        stats = file_ops.get_storage_statistics(archive)

        assert stats['partitions_count'] == 2
        assert stats['archived_files_count'] == 2
        assert stats['archived_files_size'] == 8

    def test_get_storage_statistics_missing_archive(self, file_ops, temp_dir):
        """Тест статистики несуществующего архива."""
        stats = file_ops.get_storage_statistics(temp_dir / "missing")

        assert stats['partitions_count'] == 0
        assert stats['archived_files_count'] == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
