"""
Bulk idea ingestion from CSV, Excel and JSON uploads
"""

import csv
import io
import json
import logging
import re
import zipfile
from collections import namedtuple
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from sqlalchemy.exc import SQLAlchemyError

from models import db, Idea
from utils.caching import invalidate_filter_cache
from utils.error_handling import MalformedPayload
from utils.file_utils import detect_upload_format, guess_content_type, sanitize_filename
from utils.idea_service import TEXT_FIELDS, split_list_value
from utils.upload_history_service import UploadHistoryService

logger = logging.getLogger(__name__)

IngestResult = namedtuple('IngestResult', ['batch_id', 'success_count', 'failure_count', 'upload'])

LIST_FIELDS = {
    'targetAudience': 'set_target_audience',
    'specialAdvantages': 'set_special_advantages',
}

REQUIRED_FIELDS = ('title', 'category', 'sector')


def normalize_header(name):
    """'Investment Needed', 'investment_needed' and 'investmentNeeded' all map to 'investmentneeded'"""
    return re.sub(r'[\s_\-]+', '', str(name or '')).strip().lower()


# Normalized column name -> payload key
COLUMN_KEYS = {normalize_header(key): key for key in list(TEXT_FIELDS) + ['investmentNeeded'] + list(LIST_FIELDS)}


def parse_amount(value):
    """Decimal investment amount; anything unparsable or negative becomes 0"""
    if value is None or isinstance(value, bool):
        return Decimal('0')
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return Decimal('0')
    if not amount.is_finite() or amount < 0:
        return Decimal('0')
    return amount


def is_amount(value):
    if value is None:
        return True
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return False
    try:
        return Decimal(str(value).strip()).is_finite()
    except (InvalidOperation, ValueError):
        return False


def check_json_idea(index, item):
    """Raise MalformedPayload unless the element has the shape of an idea"""
    if not isinstance(item, dict):
        raise MalformedPayload(f"Invalid JSON format: element {index} is not an object")
    for key, value in item.items():
        column = COLUMN_KEYS.get(normalize_header(key))
        if column is None:
            raise MalformedPayload(f"Invalid JSON format: element {index} has unknown field '{key}'")
        if value is None:
            continue
        if column == 'investmentNeeded':
            valid = is_amount(value)
        elif column in LIST_FIELDS:
            valid = isinstance(value, list) and all(isinstance(v, str) for v in value)
        else:
            valid = not isinstance(value, (dict, list))
        if not valid:
            raise MalformedPayload(f"Invalid JSON format: element {index} has an invalid '{key}'")


def cell_to_text(value, data_type=None):
    """Render a spreadsheet cell value as text"""
    if value is None:
        return None
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else str(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if hasattr(value, 'text'):
        # Array formula
        return (value.text or '').lstrip('=')
    text = str(value)
    if data_type == 'f' and text.startswith('='):
        return text[1:]
    return text.strip()


class BulkUploadService:
    """Runs one upload through detect, register, parse, persist and finalize"""

    def __init__(self, history_service=None):
        self.history_service = history_service or UploadHistoryService()

    def ingest(self, file_bytes, filename, uploaded_by, content_type=None):
        """
        Ingest an uploaded file.

        Returns:
            IngestResult(batch_id, success_count, failure_count, upload)

        Raises:
            UnsupportedFormat: before anything is written
            MalformedPayload: after the batch is registered; no ideas are created
        """
        upload_format = detect_upload_format(filename)
        filename = sanitize_filename(filename)

        upload = self.history_service.create_upload_record(
            filename=filename,
            uploaded_by=uploaded_by,
            file_size=len(file_bytes),
            content_type=guess_content_type(filename, content_type)
        )

        try:
            if upload_format == 'csv':
                candidates = self.parse_csv(file_bytes)
            elif upload_format == 'spreadsheet':
                candidates = self.parse_spreadsheet(file_bytes)
            else:
                candidates = self.parse_json(file_bytes)
        except MalformedPayload:
            self.history_service.finalize_upload(upload, 0, status='FAILED')
            logger.warning(f"Upload batch {upload.batch_id} ({filename}) could not be parsed")
            raise

        for idea in candidates:
            idea.upload_batch_id = upload.batch_id
            idea.active = True

        success_count, failure_count = self.save_ideas(candidates)
        self.history_service.finalize_upload(upload, success_count)
        invalidate_filter_cache()

        logger.info(f"Upload batch {upload.batch_id} ({filename}): {success_count} saved, {failure_count} failed")
        return IngestResult(upload.batch_id, success_count, failure_count, upload)

    def save_ideas(self, ideas):
        """Persist each idea in its own savepoint; failures are logged and skipped. Caller commits."""
        success_count = 0
        failure_count = 0
        for index, idea in enumerate(ideas, start=1):
            missing = [field for field in REQUIRED_FIELDS if not getattr(idea, field)]
            if missing:
                failure_count += 1
                logger.warning(f"Skipping row {index}: missing {', '.join(missing)}")
                continue
            try:
                with db.session.begin_nested():
                    db.session.add(idea)
                success_count += 1
            except SQLAlchemyError as e:
                failure_count += 1
                logger.warning(f"Failed to save row {index} ({idea.title}): {str(e)}")
        return success_count, failure_count

    def build_idea(self, values, from_text=True):
        """Build an Idea candidate from a normalized-key -> value mapping"""
        idea = Idea()
        for key, attribute in TEXT_FIELDS.items():
            value = values.get(normalize_header(key))
            if value is None:
                value = ''
            elif not isinstance(value, str):
                value = cell_to_text(value) if from_text else json.dumps(value)
            setattr(idea, attribute, value.strip())
        idea.investment_needed = parse_amount(values.get(normalize_header('investmentNeeded')))
        for key, setter in LIST_FIELDS.items():
            getattr(idea, setter)(split_list_value(values.get(normalize_header(key))))
        return idea

    def parse_csv(self, file_bytes):
        try:
            text = file_bytes.decode('utf-8-sig')
        except UnicodeDecodeError:
            raise MalformedPayload("CSV file must be UTF-8 encoded")

        try:
            reader = csv.reader(io.StringIO(text))
            rows = list(reader)
        except csv.Error as e:
            raise MalformedPayload(f"Invalid CSV format: {str(e)}")

        if not rows:
            return []

        headers = [normalize_header(name) for name in rows[0]]
        ideas = []
        for row in rows[1:]:
            if not any(cell.strip() for cell in row):
                continue
            values = {header: row[i] for i, header in enumerate(headers) if header and i < len(row)}
            ideas.append(self.build_idea(values))
        return ideas

    def parse_spreadsheet(self, file_bytes):
        try:
            workbook = load_workbook(io.BytesIO(file_bytes), read_only=True, data_only=False)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
            raise MalformedPayload(f"Invalid Excel file, save it as .xlsx and try again: {str(e)}")

        try:
            sheet = workbook.worksheets[0]
            rows = sheet.iter_rows()
            header_row = next(rows, None)
            if header_row is None:
                raise MalformedPayload("Excel file has no header row")
            headers = [normalize_header(cell_to_text(cell.value)) for cell in header_row]
            if not any(headers):
                raise MalformedPayload("Excel file has no header row")

            ideas = []
            for row in rows:
                values = {}
                for i, cell in enumerate(row):
                    if i >= len(headers) or not headers[i]:
                        continue
                    text = cell_to_text(cell.value, getattr(cell, 'data_type', None))
                    if text is not None and text != '':
                        values[headers[i]] = text
                if values:
                    ideas.append(self.build_idea(values))
            return ideas
        finally:
            workbook.close()

    def parse_json(self, file_bytes):
        try:
            payload = json.loads(file_bytes.decode('utf-8-sig'))
        except (UnicodeDecodeError, ValueError) as e:
            raise MalformedPayload(f"Invalid JSON format: {str(e)}")

        if not isinstance(payload, list):
            raise MalformedPayload("Invalid JSON format: expected an array of ideas")

        for index, item in enumerate(payload, start=1):
            check_json_idea(index, item)

        ideas = []
        for item in payload:
            values = {normalize_header(key): value for key, value in item.items()}
            ideas.append(self.build_idea(values, from_text=False))
        return ideas
