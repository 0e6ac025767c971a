"""
Главный модуль CLI интерфейса архиватора медиафайлов.

Без аргументов архивирует <cwd>/Raw в <родитель cwd>/柠泽 и печатает
список дубликатов.
"""

import argparse
import sys
import traceback
from typing import Optional

from .config_loader import load_config
from .logger import ArchiverLogger
from .archiver import ArchiveError, ArchiveStats, create_archiver


class ArchiverCLI:
    """Класс для обработки команд CLI."""

    def __init__(self):
        self.config = None
        self.logger = None
        self.archiver = None

    def setup(self, config_path: Optional[str] = None, verbose: bool = False) -> bool:
        """
        Инициализирует CLI с конфигурацией.

        Args:
            config_path: Путь к файлу конфигурации (None - значения по умолчанию)
            verbose: Включить отладочное логирование

        Returns:
            bool: True если инициализация успешна
        """
        try:
            self.config = load_config(config_path)
            if verbose:
                self.config.logging.level = 'DEBUG'

            self.logger = ArchiverLogger(self.config.logging)
            self.archiver = create_archiver(self.logger)

            self.logger.log_config_loaded(config_path)
            return True

        except (OSError, ValueError) as e:
            print(f"❌ Ошибка инициализации: {e}")
            return False

    def cmd_archive(self) -> int:
        """
        Архивирует медиафайлы и печатает отчет.

        Returns:
            int: Код возврата (0 - успех, 1 - ошибка)
        """
        paths = self.config.paths

        try:
            stats = self.archiver.archive(paths.source_dir, paths.archive_dir)
        except ArchiveError as e:
            print(f"❌ Ошибка: {e}")
            return 1

        self.print_report(stats)

        try:
            storage = self.archiver.file_ops.get_storage_statistics(paths.archive_dir)
            self.logger.log_system_info(
                f"В архиве {storage['archived_files_count']} файлов "
                f"в {storage['partitions_count']} разделах"
            )
        except OSError as e:
            self.logger.log_warning(f"Не удалось получить статистику архива: {e}")

        return 0

    def print_report(self, stats: ArchiveStats) -> None:
        """Печатает список дубликатов и итоги запуска."""
        if stats.duplicates:
            print("Следующие файлы являются дубликатами и не были обработаны:")
            for duplicate in stats.duplicates:
                print(duplicate)
        else:
            print("Дубликатов нет.")

        print(f"📊 Перемещено: {stats.archived_files}, "
              f"дубликатов: {stats.duplicate_files}, "
              f"пропущено: {stats.skipped_files}")

        if stats.errors:
            print(f"⚠️ Файлы с ошибками ({len(stats.errors)}):")
            for error in stats.errors[:10]:
                print(f"   • {error['file']}: {error['error']}")
            if len(stats.errors) > 10:
                print(f"   ... и еще {len(stats.errors) - 10}")

        print("Архивация завершена!")


def create_parser() -> argparse.ArgumentParser:
    """
    Создает парсер аргументов командной строки.

    Returns:
        argparse.ArgumentParser: Настроенный парсер
    """
    parser = argparse.ArgumentParser(
        description="Архивация медиафайлов по месяцам с удалением дубликатов",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Примеры использования:

  # Архивация ./Raw в ../柠泽
  python -m media_archiver

  # Пути и логирование из файла конфигурации
  python -m media_archiver --config config/settings.ini
        """
    )

    parser.add_argument(
        '--config',
        default=None,
        help='Путь к файлу конфигурации (по умолчанию пути берутся от текущего каталога)'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Подробный вывод'
    )

    return parser


def main(argv=None) -> int:
    """Главная функция CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    cli = ArchiverCLI()

    if not cli.setup(args.config, args.verbose):
        return 1

    try:
        return cli.cmd_archive()

    except KeyboardInterrupt:
        print("\n⚠️ Операция прервана пользователем")
        return 1
    except Exception as e:
        print(f"❌ Неожиданная ошибка: {e}")
        if args.verbose:
            traceback.print_exc()
        return 1
    finally:
        cli.logger.close()


if __name__ == "__main__":
    sys.exit(main())
