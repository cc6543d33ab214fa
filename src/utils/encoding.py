"""Decoding of base64 file uploads."""

import base64
import binascii

from src.exceptions import ValidationError


def decode_csv_data(data: str) -> str:
    """
    Decode a base64-encoded CSV file to text.

    Line breaks in the encoded data are ignored and a UTF-8 byte order mark,
    as written by spreadsheet exports, is dropped.

    Raises:
        ValidationError: If the data is not valid base64 or not UTF-8 text
    """
    try:
        raw_data = base64.b64decode("".join(data.split()), validate=True)
        return raw_data.decode("utf-8-sig")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ValidationError(f"Failed to decode base64 data: {e}") from e
