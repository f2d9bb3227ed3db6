# bidtracker/services/csv_import.py
"""Decode an uploaded bid sheet (CSV) into flat rows keyed by the import columns."""

import csv
import logging
from io import StringIO

from ..errors import ValidationError

logger = logging.getLogger(__name__)

IMPORT_COLUMNS = (
    'projectName',
    'clientCompany',
    'contactName',
    'proposalDate',
    'dueDate',
    'jobLocation',
    'leadSource',
    'bidStatus',
    'scopeName',
    'scopeCost',
    'scopeStatus',
)

REQUIRED_COLUMNS = ('projectName', 'clientCompany')

_COLUMN_LOOKUP = {column.lower(): column for column in IMPORT_COLUMNS}

# Spreadsheet exports are usually UTF-8 (with or without BOM) or Windows-1252
ENCODINGS = ('utf-8-sig', 'cp1252')


def _decode(data):
    if isinstance(data, str):
        return data
    for encoding in ENCODINGS:
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise ValidationError('File could not be decoded as text')


def parse_import_csv(data):
    """
    Parse CSV bytes (or text) into a list of row dicts.

    Header names are matched to the import columns case-insensitively; unknown
    columns are ignored and missing ones read as ''. Every value is stripped.
    Rows with no values at all are skipped.

    Raises:
        ValidationError: the file is not text, or lacks projectName/clientCompany headers
    """
    reader = csv.DictReader(StringIO(_decode(data)))
    headers = {}
    for header in reader.fieldnames or []:
        column = _COLUMN_LOOKUP.get((header or '').strip().lower())
        if column and column not in headers.values():
            headers[header] = column

    missing = [column for column in REQUIRED_COLUMNS if column not in headers.values()]
    if missing:
        raise ValidationError(f"Missing required column(s): {', '.join(missing)}")

    rows = []
    for raw in reader:
        row = {column: '' for column in IMPORT_COLUMNS}
        for header, column in headers.items():
            value = raw.get(header)
            row[column] = value.strip() if isinstance(value, str) else ''
        if any(row.values()):
            rows.append(row)

    logger.info(f"Decoded {len(rows)} import rows")
    return rows
