from typing import Any, Dict, Iterable, List, Optional
import io
import logging
import math
import os
import warnings
from datetime import date, datetime, time

import numpy as np
import pandas as pd

from config import SAMPLE_ROWS
from models.common_models import Column, ColumnType, Row, Table
from services.errors import EmptyDataError, ParseError

logger = logging.getLogger(__name__)

CSV_EXTENSIONS = {".csv"}
SPREADSHEET_EXTENSIONS = {".xls", ".xlsx"}
SUPPORTED_EXTENSIONS = CSV_EXTENSIONS | SPREADSHEET_EXTENSIONS

_BOOLEAN_LITERALS = {"true", "false"}


def file_extension(filename: Optional[str]) -> str:
    return os.path.splitext(filename or "")[1].lower()


def parse_table(content: bytes, filename: str) -> Table:
    """
    Parse an uploaded CSV or spreadsheet into a Table.

    CSV cells are kept as the strings that were read; spreadsheet cells keep
    their native types (dates as ISO strings, blanks as None). Only the
    column metadata is inferred, the row data itself is never coerced.

    Raises ParseError for unreadable input and EmptyDataError when the file
    has no data rows.
    """
    ext = file_extension(filename)
    logger.info("Parsing '%s' (%s)", filename, ext or "no extension")

    if ext in CSV_EXTENSIONS:
        df = _read_csv(content)
    elif ext in SPREADSHEET_EXTENSIONS:
        df = _read_spreadsheet(content)
    else:
        raise ParseError(f"Unsupported file type '{ext or filename}'. Upload a .csv, .xls or .xlsx file.")

    if df.shape[0] == 0:
        raise EmptyDataError("File is empty or contains no data.")

    names = [str(c) for c in df.columns]
    df.columns = names
    rows = normalize_rows(df.to_dict(orient="records"), names)
    columns = infer_columns(rows, names)

    logger.debug("Inferred schema for '%s': %s", filename, {c.name: c.type.value for c in columns})
    logger.info("Parsed '%s': %d rows, %d columns", filename, len(rows), len(columns))

    return Table(
        columns=columns,
        data=rows,
        row_count=len(rows),
        column_count=len(columns),
    )


def _read_csv(content: bytes) -> pd.DataFrame:
    try:
        # Everything stays a string, empty cells stay "".
        # index_col=False keeps the header authoritative: surplus fields are dropped.
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", category=pd.errors.ParserWarning)
            return pd.read_csv(
                io.BytesIO(content),
                dtype=str,
                keep_default_na=False,
                encoding="utf-8-sig",
                engine="python",
                index_col=False,
            )
    except pd.errors.EmptyDataError as exc:
        raise EmptyDataError("CSV file is empty or contains no data.") from exc
    except (pd.errors.ParserError, UnicodeDecodeError) as exc:
        logger.warning("CSV parse failed: %s", exc)
        raise ParseError(f"Failed to parse CSV: {exc}") from exc


def _read_spreadsheet(content: bytes) -> pd.DataFrame:
    try:
        df = pd.read_excel(io.BytesIO(content), sheet_name=0)
    except Exception as exc:
        logger.warning("Spreadsheet parse failed: %s", exc)
        raise ParseError(f"Failed to parse Excel file: {exc}") from exc

    # Blank rows carry no data
    return df.dropna(how="all")


def normalize_rows(records: Iterable[Dict[str, Any]], names: List[str]) -> List[Row]:
    """Give every row exactly the header key set: fill gaps with None, drop extras."""
    return [{name: _to_scalar(record.get(name)) for name in names} for record in records]


def _to_scalar(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (datetime, date, time)):
        if pd.isna(value):
            return None
        return value.isoformat()
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


# Type inference

def infer_columns(rows: List[Row], names: List[str], sample_rows: int = SAMPLE_ROWS) -> List[Column]:
    sample = rows[:sample_rows]
    return [
        Column(name=name, type=infer_column_type([row.get(name) for row in sample]))
        for name in names
    ]


def infer_column_type(values: Iterable[Any]) -> ColumnType:
    """
    Classify sampled values. Blank samples are skipped; the first sample that
    looks like a number, date or boolean (checked in that order) decides.
    """
    for value in values:
        if _is_blank(value):
            continue
        if _is_number(value):
            return ColumnType.NUMBER
        if _is_date(value):
            return ColumnType.DATE
        if _is_boolean(value):
            return ColumnType.BOOLEAN
    return ColumnType.STRING


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def _is_number(value: Any) -> bool:
    if isinstance(value, (bool, np.bool_)):
        return False
    if isinstance(value, (int, float, np.number)):
        return True
    if isinstance(value, str):
        text = value.strip()
        if "_" in text:
            return False
        try:
            number = float(text)
        except ValueError:
            return False
        return not math.isnan(number)
    return False


def _is_date(value: Any) -> bool:
    if isinstance(value, (datetime, date)):
        return True
    if not isinstance(value, str):
        return False
    text = value.strip()
    # A calendar date needs at least a day or a year
    if not any(ch.isdigit() for ch in text):
        return False
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", category=UserWarning)
            parsed = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return False
    return not pd.isna(parsed)


def _is_boolean(value: Any) -> bool:
    if isinstance(value, (bool, np.bool_)):
        return True
    return isinstance(value, str) and value.strip().lower() in _BOOLEAN_LITERALS
