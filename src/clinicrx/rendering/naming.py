"""Download filenames and the short date format used on printed output."""

from datetime import date, datetime
from typing import Union


def locale_date(value: Union[date, datetime]) -> str:
    """US short date without zero padding, e.g. ``3/5/2024``."""
    return f"{value.month}/{value.day}/{value.year}"


def download_filename(mr_number: str, prescription_date: Union[date, datetime], extension: str = "pdf") -> str:
    """``prescription-<mr>-<M-D-YYYY>.<ext>``; the date's slashes become dashes."""
    stamp = locale_date(prescription_date).replace("/", "-")
    return f"prescription-{mr_number}-{stamp}.{extension.lstrip('.')}"
