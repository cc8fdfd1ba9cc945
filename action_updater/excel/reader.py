from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

"""Spreadsheet reader: uploaded file -> header + rows.

The first line is the header, every following non-empty line is one row.
Only the first sheet of a workbook is read. Cell values are kept as read
(text or number); empty cells become None.
"""

__all__ = [
    "SpreadsheetError",
    "SheetData",
    "SUPPORTED_SUFFIXES",
    "read_spreadsheet",
    "read_raw_frame",
    "normalize_sheet",
]

SUPPORTED_SUFFIXES = (".xlsx", ".xls", ".csv")


class SpreadsheetError(Exception):
    """Raised when an uploaded file cannot be turned into rows."""


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]
    rows: list[dict[str, Any]]  # 列名→値 (ファイル順)


def read_raw_frame(path: Path) -> tuple[str, pd.DataFrame]:
    """Read the first sheet (or the CSV) without header interpretation.

    Returns:
        (sheet name, raw DataFrame)

    Raises:
        SpreadsheetError: If the file is missing, unsupported or unreadable
    """
    if not path.exists():
        raise SpreadsheetError(f"file not found: {path}")
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise SpreadsheetError(
            f"unsupported file type '{suffix}' (expected one of {', '.join(SUPPORTED_SUFFIXES)})"
        )
    try:
        if suffix == ".csv":
            # 文字列のまま読む (ID の数値化・"NA" の欠損化を避ける)
            df = pd.read_csv(path, header=None, dtype=str, keep_default_na=False)
            return path.stem, df
        xls = pd.ExcelFile(path)
        if not xls.sheet_names:
            raise SpreadsheetError(f"workbook has no sheets: {path.name}")
        name = xls.sheet_names[0]
        # "NA" / "N/A" / "null" をセル文字列のまま残す (CSV と同じ扱い)
        return str(name), xls.parse(name, header=None, keep_default_na=False, na_values=[])
    except SpreadsheetError:
        raise
    except Exception as e:
        raise SpreadsheetError(
            f"failed to parse {path.name}; please ensure it's a valid .xlsx, .xls or .csv file: {e}"
        ) from e


def _is_blank(val: Any) -> bool:
    if val is None:
        return True
    if isinstance(val, str):
        return val.strip() == ""
    return bool(pd.isna(val))


def normalize_sheet(df: pd.DataFrame, sheet_name: str) -> SheetData:
    """Normalize a raw DataFrame using the first row as header.

    Steps:
    1. Extract header from the first row (blank header cells become "Unnamed: <i>")
    2. Remaining rows become data rows; fully blank rows are skipped
    3. Blank cells become None
    """
    if df.shape[0] < 1:
        raise SpreadsheetError(f"sheet '{sheet_name}' has no header row")
    columns: list[str] = []
    for i, c in enumerate(df.iloc[0].tolist()):
        columns.append(f"Unnamed: {i}" if _is_blank(c) else str(c).strip())

    rows: list[dict[str, Any]] = []
    for _, raw in df.iloc[1:].iterrows():
        values = raw.tolist()
        if all(_is_blank(v) for v in values):
            continue
        row: dict[str, Any] = {}
        for col, val in zip(columns, values, strict=False):
            row[col] = None if _is_blank(val) else val
        rows.append(row)
    return SheetData(sheet_name=sheet_name, columns=columns, rows=rows)


def read_spreadsheet(path: Path) -> SheetData:
    """Read an uploaded spreadsheet into header + rows.

    Raises:
        SpreadsheetError: If the file is unreadable or contains no data rows
    """
    sheet_name, df = read_raw_frame(path)
    data = normalize_sheet(df, sheet_name)
    if not data.rows:
        raise SpreadsheetError(f"{path.name}: no data rows")
    return data
