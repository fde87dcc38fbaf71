"""
File utility functions for bulk idea uploads
"""
import os
import re
import mimetypes
from typing import Optional

from utils.error_handling import UnsupportedFormat

# Upload formats accepted by the ingestion pipeline
UPLOAD_FORMATS = {
    'csv': {
        'name': 'CSV',
        'extensions': ['.csv'],
        'mime_types': ['text/csv', 'application/csv', 'text/plain'],
    },
    'spreadsheet': {
        'name': 'Excel',
        'extensions': ['.xlsx', '.xls'],
        'mime_types': ['application/vnd.openxmlformats-officedocument.spreadsheetml.sheet', 'application/vnd.ms-excel'],
    },
    'json': {
        'name': 'JSON',
        'extensions': ['.json'],
        'mime_types': ['application/json', 'text/json'],
    },
}


def get_file_extension(filename: Optional[str]) -> str:
    """Lower-cased extension including the dot, or '' when there is none"""
    if not filename:
        return ''
    return os.path.splitext(filename)[1].lower()


def detect_upload_format(filename: Optional[str]) -> str:
    """
    Determine the ingestion format from the file extension.

    Args:
        filename: Original upload filename

    Returns:
        One of 'csv', 'spreadsheet', 'json'

    Raises:
        UnsupportedFormat: extension is not one of csv, xlsx, xls, json
    """
    extension = get_file_extension(filename)
    for format_key, format_info in UPLOAD_FORMATS.items():
        if extension in format_info['extensions']:
            return format_key
    raise UnsupportedFormat(f"Unsupported file format: {extension or filename or 'unknown'}. Use CSV, Excel or JSON.")


def guess_content_type(filename: str, content_type: Optional[str] = None) -> Optional[str]:
    if content_type and content_type != 'application/octet-stream':
        return content_type
    return mimetypes.guess_type(filename or '')[0] or content_type


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB")
    """
    if not size_bytes:
        return "0 B"

    size_names = ["B", "KB", "MB", "GB", "TB"]
    i = 0
    size = float(size_bytes)
    while size >= 1024 and i < len(size_names) - 1:
        size /= 1024.0
        i += 1

    return f"{size:.1f} {size_names[i]}"


def sanitize_filename(filename: Optional[str]) -> str:
    """Strip path components and unsafe characters from an upload filename"""
    filename = os.path.basename((filename or '').replace('\\', '/'))
    filename = re.sub(r'[<>:"/\\|?*]', '_', filename)
    filename = re.sub(r'_+', '_', filename).strip()

    if not filename:
        filename = 'upload'

    if len(filename) > 200:
        name, ext = os.path.splitext(filename)
        filename = name[:200 - len(ext)] + ext

    return filename
