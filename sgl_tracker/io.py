"""Spreadsheet import of leads and export of lead and leader lists."""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, MutableMapping, Optional, Sequence, Union

import pandas as pd

from .dates import format_date
from .models import DEFAULT_SOURCE, Lead, LeadStatus, OnboardedLeader, clean_optional
from .phone import is_normalized, normalize_phone

LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]

_CSV_SUFFIXES = {".csv", ".tsv"}
_EXCEL_SUFFIXES = {".xlsx", ".xlsm"}

IMPORT_COLUMNS = ("name", "phone", "location", "salesperson", "cohort", "remark", "appointment")
REQUIRED_IMPORT_COLUMNS = ("name", "phone", "location", "salesperson")

LEAD_EXPORT_COLUMNS = [
    "Name",
    "Phone",
    "Location",
    "Status",
    "Remark",
    "Appointment",
    "Salesperson",
    "Source",
    "Cohort",
]
LEADER_EXPORT_COLUMNS = [
    "Name",
    "Phone",
    "Location",
    "Upgrade Date",
    "Ordered",
    "Salesperson",
    "Source",
    "Cohort",
    "Remark",
]


class UnsupportedFileTypeError(ValueError):
    """Raised when an unsupported file format is passed to the importer or exporter."""


@dataclass(slots=True)
class ImportDiagnostic:
    """A problem found on one spreadsheet row. Row 2 is the first data row."""

    row: int
    message: str
    rejected: bool = False

    def __str__(self) -> str:
        return f"Row {self.row}: {self.message}"


@dataclass(slots=True)
class ImportReport:
    leads: List[Lead] = field(default_factory=list)
    diagnostics: List[ImportDiagnostic] = field(default_factory=list)
    total_rows: int = 0

    @property
    def rejected_rows(self) -> List[ImportDiagnostic]:
        return [diagnostic for diagnostic in self.diagnostics if diagnostic.rejected]

    @property
    def warnings(self) -> List[ImportDiagnostic]:
        return [diagnostic for diagnostic in self.diagnostics if not diagnostic.rejected]


# --- Import ---

def import_leads(
    path: PathLike,
    *,
    sheet_name: Union[str, int] = 0,
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> ImportReport:
    """Read leads from a CSV or Excel file with a header row.

    Headers are matched case-insensitively. Rows missing a name, phone,
    location or salesperson are rejected; a phone that cannot be normalized is
    kept as typed and reported as a warning. Accepted leads start as
    "Not contacted" with source "From List".
    """

    report = ImportReport()
    bad_lines = _BadLines()
    try:
        dataframe = _read_dataframe(path, sheet_name=sheet_name, loader_kwargs=loader_kwargs, bad_lines=bad_lines)
    except pd.errors.EmptyDataError:
        dataframe = pd.DataFrame()
    except pd.errors.ParserError as exc:
        report.diagnostics.append(ImportDiagnostic(row=1, message=f"File could not be parsed: {exc}", rejected=True))
        LOGGER.warning("Could not parse %s: %s", path, exc)
        return report

    if dataframe.empty:
        report.diagnostics.append(ImportDiagnostic(row=1, message="File is empty or contains only headers.", rejected=True))
        LOGGER.warning("No lead rows found in %s", path)
        return report

    columns = _resolve_columns(dataframe.columns)
    batch = uuid.uuid4().hex[:12]

    for position, (_, row) in enumerate(dataframe.iterrows()):
        if _row_is_empty(row):
            continue
        row_number = position + 2
        report.total_rows += 1
        found = bad_lines.field_count(row.iloc[0])
        if found is not None:
            report.diagnostics.append(
                ImportDiagnostic(
                    row=row_number,
                    message=f"Malformed row: expected {bad_lines.width} fields, found {found}.",
                    rejected=True,
                )
            )
            continue
        values = {name: _extract(row, columns.get(name)) for name in IMPORT_COLUMNS}

        missing = [name for name in REQUIRED_IMPORT_COLUMNS if not values[name]]
        if missing:
            report.diagnostics.append(
                ImportDiagnostic(
                    row=row_number,
                    message="Missing required fields (Name, Phone, Location, Salesperson).",
                    rejected=True,
                )
            )
            continue

        phone = normalize_phone(values["phone"])
        if not is_normalized(phone):
            report.diagnostics.append(
                ImportDiagnostic(
                    row=row_number,
                    message=(
                        f"(Lead: {values['name']}) Phone \"{values['phone']}\" could not be "
                        "normalized and will be stored as is."
                    ),
                )
            )

        report.leads.append(
            Lead(
                id=f"csv-{batch}-{position}",
                name=values["name"],
                phone=phone,
                location=values["location"],
                status=LeadStatus.NOT_CONTACTED,
                remark=values["remark"],
                appointment=values["appointment"],
                salesperson=values["salesperson"],
                source=DEFAULT_SOURCE,
                cohort=values["cohort"],
                is_promoted=False,
            )
        )

    for diagnostic in report.diagnostics:
        LOGGER.warning("Lead import %s: %s", path, diagnostic)
    LOGGER.info("Parsed %s of %s rows from %s", len(report.leads), report.total_rows, path)
    return report


class _BadLines:
    """``on_bad_lines`` handler for CSV rows with more fields than the header.

    Each bad line is replaced by a placeholder row whose first cell is a token,
    so the remaining rows keep their position and the importer can report the
    row number of the rejected line.
    """

    def __init__(self) -> None:
        self.width = 0
        self._found: Dict[str, int] = {}

    def __call__(self, fields: List[str]) -> List[str]:
        token = f"\x00bad-line-{len(self._found)}"
        self._found[token] = len(fields)
        return [token] + [""] * (self.width - 1)

    def field_count(self, value: Any) -> Optional[int]:
        if not isinstance(value, str):
            return None
        return self._found.get(value)


def _read_dataframe(
    path: PathLike,
    *,
    sheet_name: Union[str, int] = 0,
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
    bad_lines: Optional[_BadLines] = None,
) -> pd.DataFrame:
    loader_kwargs = dict(loader_kwargs or {})
    # Keep phone numbers such as 0946... as text and blanks as "".
    loader_kwargs.setdefault("dtype", str)
    loader_kwargs.setdefault("keep_default_na", False)
    path_obj = Path(path)
    suffix = path_obj.suffix.lower()

    if suffix in _CSV_SUFFIXES:
        if suffix == ".tsv":
            loader_kwargs.setdefault("sep", "\t")
        loader_kwargs.setdefault("encoding", "utf-8-sig")
        if bad_lines is not None and "on_bad_lines" not in loader_kwargs:
            header = pd.read_csv(path_obj, nrows=0, **loader_kwargs)
            bad_lines.width = len(header.columns)
            # Only the python engine accepts a callable for bad lines.
            loader_kwargs["engine"] = "python"
            loader_kwargs["on_bad_lines"] = bad_lines
        return pd.read_csv(path_obj, **loader_kwargs)

    if suffix in _EXCEL_SUFFIXES:
        engine = loader_kwargs.pop("engine", None) or "openpyxl"
        return pd.read_excel(path_obj, sheet_name=sheet_name, engine=engine, **loader_kwargs)

    raise UnsupportedFileTypeError(f"Unsupported file extension: {path_obj.suffix}")


def _resolve_columns(available: Sequence[Any]) -> Dict[str, Any]:
    resolved: Dict[str, Any] = {}
    for column in available:
        key = str(column).strip().lower()
        if key in IMPORT_COLUMNS and key not in resolved:
            resolved[key] = column
    return resolved


def _row_is_empty(row: pd.Series) -> bool:
    return all(pd.isna(value) or (isinstance(value, str) and not value.strip()) for value in row.values)


def _extract(row: pd.Series, column: Any) -> Optional[str]:
    if column is None:
        return None
    value = row[column]
    if pd.isna(value):
        return None
    return clean_optional(str(value))


# --- Export ---

def leads_to_dataframe(leads: Sequence[Lead]) -> pd.DataFrame:
    records = [
        {
            "Name": lead.name,
            "Phone": lead.phone,
            "Location": lead.location,
            "Status": lead.status.value,
            "Remark": lead.remark or "",
            "Appointment": lead.appointment or "",
            "Salesperson": lead.salesperson or "",
            "Source": lead.source,
            "Cohort": lead.cohort or "",
        }
        for lead in leads
    ]
    return pd.DataFrame(records, columns=LEAD_EXPORT_COLUMNS)


def leaders_to_dataframe(leaders: Sequence[OnboardedLeader]) -> pd.DataFrame:
    records = [
        {
            "Name": leader.name,
            "Phone": leader.phone,
            "Location": leader.location,
            "Upgrade Date": leader.upgrade_date,
            "Ordered": "Yes" if leader.ordered else "No",
            "Salesperson": leader.salesperson or "",
            "Source": leader.source,
            "Cohort": leader.cohort or "",
            "Remark": leader.remark or "",
        }
        for leader in leaders
    ]
    return pd.DataFrame(records, columns=LEADER_EXPORT_COLUMNS)


def lead_export_filename(today: Optional[date] = None, suffix: str = ".csv") -> str:
    return f"leadlist_{format_date(today or date.today())}{suffix}"


def leader_export_filename(today: Optional[date] = None, suffix: str = ".csv") -> str:
    return f"onboarded_list_{format_date(today or date.today())}{suffix}"


def export_leads(
    leads: Sequence[Lead],
    directory: PathLike,
    *,
    today: Optional[date] = None,
    suffix: str = ".csv",
) -> Path:
    """Write ``leads`` to ``leadlist_<YYYY-MM-DD>`` inside ``directory``."""

    output_path = Path(directory) / lead_export_filename(today, suffix)
    _write_dataframe(leads_to_dataframe(leads), output_path, sheet_name="Leads")
    LOGGER.info("Exported %s leads to %s", len(leads), output_path)
    return output_path


def export_leaders(
    leaders: Sequence[OnboardedLeader],
    directory: PathLike,
    *,
    today: Optional[date] = None,
    suffix: str = ".csv",
) -> Path:
    """Write ``leaders`` to ``onboarded_list_<YYYY-MM-DD>`` inside ``directory``."""

    output_path = Path(directory) / leader_export_filename(today, suffix)
    _write_dataframe(leaders_to_dataframe(leaders), output_path, sheet_name="Onboarded Leaders")
    LOGGER.info("Exported %s onboarded leaders to %s", len(leaders), output_path)
    return output_path


def _write_dataframe(dataframe: pd.DataFrame, path: Path, *, sheet_name: str) -> None:
    suffix = path.suffix.lower()
    path.parent.mkdir(parents=True, exist_ok=True)

    if suffix in _CSV_SUFFIXES:
        separator = "\t" if suffix == ".tsv" else ","
        dataframe.to_csv(path, index=False, sep=separator)
        return

    if suffix == ".xlsx":
        dataframe.to_excel(path, index=False, sheet_name=sheet_name, engine="openpyxl")
        return

    raise UnsupportedFileTypeError(f"Unsupported export file extension: {suffix}")


__all__ = [
    "LEAD_EXPORT_COLUMNS",
    "LEADER_EXPORT_COLUMNS",
    "UnsupportedFileTypeError",
    "ImportDiagnostic",
    "ImportReport",
    "import_leads",
    "leads_to_dataframe",
    "leaders_to_dataframe",
    "lead_export_filename",
    "leader_export_filename",
    "export_leads",
    "export_leaders",
]
