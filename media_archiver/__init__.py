"""
Media Archiver

Утилита для раскладки фото и видео по месяцам (YYYY-MM) с переименованием
по дате и MD5 и пропуском дубликатов.
"""

__version__ = "1.0.0"
__author__ = "Media Archiver Team"
__description__ = "Utility for archiving media files into a month-based structure with deduplication"
