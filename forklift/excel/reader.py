from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd

from ..errors import ReadError
from ..models.config_models import ReaderConfig
from ..models.import_data import ImportData

"""Excel reader collaborator.

The configured header row (default: row 1) supplies the field names, every
later non-blank row becomes one Record. Cells are read as text; empty cells
become empty strings. Line numbers are the worksheet row numbers (1-based), so
validation messages point at the row a user sees in Excel.
"""

__all__ = [
    "SheetHeaderError",
    "DuplicateColumnsError",
    "ExcelReader",
    "read_excel_file",
    "normalize_sheet",
]


class SheetHeaderError(ReadError):
    """Raised when the header row is missing or has no column names."""


class DuplicateColumnsError(ReadError):
    """Raised when two header cells carry the same column name."""


def read_excel_file(
    path: Path | str, sheet: str | None = None, keep_na_strings: list[str] | None = None
) -> pd.DataFrame:
    """Read one worksheet without header interpretation.

    Parameters
    ----------
    path: workbook path
    sheet: worksheet name (None -> first sheet)
    keep_na_strings: strings excluded from pandas' default NaN conversion (e.g. ['NA'])
    """
    import pandas._libs.parsers as parsers

    if keep_na_strings:
        # 既定のNA値から keep_na_strings を除外
        na_values = list(parsers.STR_NA_VALUES - set(keep_na_strings))
        keep_default_na = False
    else:
        na_values = None
        keep_default_na = True

    with pd.ExcelFile(path, engine="openpyxl") as xls:
        name = sheet if sheet is not None else xls.sheet_names[0]
        return xls.parse(
            name,
            header=None,
            dtype=str,
            keep_default_na=keep_default_na,
            na_values=na_values,
        )


def _cell_text(value: Any) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return str(value).strip()


def normalize_sheet(df: pd.DataFrame, source_path: str, header_row: int = 1) -> ImportData:
    """Turn a raw worksheet DataFrame into ImportData.

    Steps:
    1. Take column names from ``header_row`` (1-based)
    2. Every following row becomes a Record; fully blank rows are skipped
    3. Columns with a blank header cell are ignored
    """
    header_index = header_row - 1
    if df.shape[0] <= header_index:
        raise SheetHeaderError(f"'{source_path}' has no header row {header_row}")

    header = [_cell_text(c) for c in df.iloc[header_index].tolist()]
    named = [(pos, name) for pos, name in enumerate(header) if name]
    if not named:
        raise SheetHeaderError(f"'{source_path}' header row {header_row} is empty")

    seen: set[str] = set()
    duplicates: set[str] = set()
    for _, name in named:
        if name in seen:
            duplicates.add(name)
        seen.add(name)
    if duplicates:
        raise DuplicateColumnsError(f"'{source_path}' has duplicate columns: {sorted(duplicates)}")

    data = ImportData(source_path=source_path, columns=[name for _, name in named])
    for index in range(header_index + 1, df.shape[0]):
        cells = df.iloc[index].tolist()
        values = {name: _cell_text(cells[pos]) if pos < len(cells) else "" for pos, name in named}
        if all(v == "" for v in values.values()):
            continue
        # DataFrame index 0 は Excel の 1 行目
        data.new_record(index + 1, values)
    return data


class ExcelReader:
    """Reader collaborator backed by pandas + openpyxl."""

    def __init__(self, config: ReaderConfig | None = None) -> None:
        self.config = config or ReaderConfig()

    def read(self, source_path: str) -> ImportData:
        """Read ``source_path`` into ImportData.

        Raises:
            ReadError: file missing, not a workbook, malformed content, unknown sheet or bad header.
        """
        try:
            df = read_excel_file(
                source_path,
                sheet=self.config.sheet,
                keep_na_strings=list(self.config.keep_na_strings) or None,
            )
        except Exception as e:
            # openpyxl は壊れた XML で ParseError (SyntaxError) を投げる
            raise ReadError(f"cannot read '{source_path}': {e}") from e
        return normalize_sheet(df, source_path, header_row=self.config.header_row)
