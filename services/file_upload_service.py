from fastapi import UploadFile

from config import MAX_UPLOAD_BYTES
from services.errors import ParseError
from services.excel_reader_service import SUPPORTED_EXTENSIONS, file_extension


def read_uploaded_file(file: UploadFile) -> bytes:
    """
    Validate the upload and return its raw bytes.
    Only .csv, .xls and .xlsx files up to MAX_UPLOAD_BYTES are accepted.
    """
    if not file.filename:
        raise ParseError("Please upload a file.")

    ext = file_extension(file.filename)
    if ext not in SUPPORTED_EXTENSIONS:
        raise ParseError("Only Excel (.xlsx, .xls) and CSV (.csv) files are supported.")

    content = file.file.read()
    if len(content) > MAX_UPLOAD_BYTES:
        raise ParseError(f"File exceeds the {MAX_UPLOAD_BYTES} byte upload limit.")

    return content
