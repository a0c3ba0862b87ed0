"""
Record Adapters - Bridge to system and registry data sources.

The adapter pattern lets us swap implementations (files for the CLI,
in-memory for tests and the API) without changing matcher logic.

Column headers are matched accent- and case-insensitively, so both the
registry's Portuguese export headers ("Descrição", "Nome Fornecedor",
"TOMBAMENTO") and plain English ones work.
"""

import csv
import io
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional

from openpyxl import load_workbook

from .models import PastedRecord, RegistryRecord, SystemRecord
from .normalize import normalize_tag, normalize_text, parse_state_and_origin


SYSTEM_COLUMNS = {
    "id": ["id"],
    "description": ["description", "descricao"],
    "supplier": ["supplier", "fornecedor"],
    "unit": ["unit", "unidade"],
    "type": ["type", "tipo"],
    "state": ["state", "estado"],
    "location": ["location", "localizacao"],
    "tag": ["tag", "tombamento", "tombo"],
}

REGISTRY_COLUMNS = {
    "tag": ["tag", "tombamento", "tombo"],
    "description": ["description", "descricao"],
    "species": ["species", "especie"],
    "supplier": ["supplier", "nome fornecedor", "fornecedor"],
    "unit": ["unit", "unidade"],
    "status": ["status", "situacao"],
}

# Placeholder used in pasted sheets for "no tag yet" (sem tombamento)
NO_TAG = "S/T"


def _map_row(row: dict, columns: dict[str, list[str]]) -> dict[str, Optional[str]]:
    """
    Pick known fields out of a raw row.

    A column that is absent stays None; a present but blank cell is "".
    """
    by_header = {normalize_text(k): v for k, v in row.items() if k is not None}
    mapped = {}
    for field_name, aliases in columns.items():
        value = None
        for alias in aliases:
            if alias in by_header:
                raw = by_header[alias]
                value = None if raw is None else str(raw).strip()
                break
        mapped[field_name] = value
    return mapped


def parse_system_row(row: dict, row_number: int = 0) -> Optional[SystemRecord]:
    """Parse a row dict into a SystemRecord (rows without description or id are skipped)."""
    fields = _map_row(row, SYSTEM_COLUMNS)
    if not fields["description"] and not fields["id"]:
        return None

    record_id = fields.pop("id") or str(row_number)
    tag = fields.pop("tag")
    return SystemRecord(id=record_id, tag=normalize_tag(tag) or None, **fields)


def parse_registry_row(row: dict, row_number: int = 0) -> Optional[RegistryRecord]:
    """Parse a row dict into a RegistryRecord (rows without a tag are skipped)."""
    fields = _map_row(row, REGISTRY_COLUMNS)
    tag = normalize_tag(fields.pop("tag"))
    if not tag:
        return None
    return RegistryRecord(tag=tag, **fields)


def _read_rows(path: Path) -> list[dict]:
    suffix = path.suffix.lower()
    if suffix == ".csv":
        with open(path, "r", newline="", encoding="utf-8-sig") as f:
            return list(csv.DictReader(f))

    if suffix == ".json":
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"Expected a JSON list of records in {path.name}")
        return data

    if suffix == ".xlsx":
        wb = load_workbook(path, read_only=True, data_only=True)
        try:
            rows = wb.active.iter_rows(values_only=True)
            headers = next(rows, None)
            if headers is None:
                return []
            headers = [str(h).strip() if h is not None else None for h in headers]
            return [dict(zip(headers, values)) for values in rows]
        finally:
            wb.close()

    raise ValueError(f"Unsupported file format: {suffix}")


class RecordAdapter(ABC):
    """
    Abstract interface for record access.

    Implementations fetch records for a given unit.
    The matcher doesn't know or care where the data actually lives.
    """

    @abstractmethod
    def get_records_for_unit(self, unit: str) -> list:
        """
        Fetch records for a unit.

        Args:
            unit: Unit name (compared accent- and case-insensitively)

        Returns:
            List of records for that unit
        """
        pass

    @abstractmethod
    def get_all_records(self) -> list:
        """Get every record regardless of unit."""
        pass

    def get_all_units(self) -> list[str]:
        """Get sorted list of all unit names present in the data."""
        return sorted({r.unit for r in self.get_all_records() if r.unit})


class InMemoryRecordAdapter(RecordAdapter):
    """
    In-memory adapter for programmatic setup.

    Useful for unit tests and for records posted to the API.
    """

    def __init__(self, records: list | None = None):
        self._records = list(records or [])

    def add_record(self, record):
        """Add a single record."""
        self._records.append(record)

    def add_records(self, records: list):
        """Add multiple records."""
        for record in records:
            self.add_record(record)

    def clear(self):
        """Remove all records."""
        self._records = []

    def get_records_for_unit(self, unit: str) -> list:
        target = normalize_text(unit)
        return [r for r in self._records if normalize_text(r.unit) == target]

    def get_all_records(self) -> list:
        return list(self._records)


class FileRecordAdapter(InMemoryRecordAdapter):
    """
    Loads records from a CSV, JSON or XLSX file.

    CSV format expected (system records):
        id,Descrição,Fornecedor,Unidade,Tipo,Estado,Localização,Tombamento
        a1,Mesa de reunião,Moveis Sul,Escola Central,Mobiliario,Bom,Sala 1,

    Registry files use TOMBAMENTO, Descrição, Espécie, Nome Fornecedor,
    Unidade, Status.
    """

    def __init__(self, data_path: str | Path, parser: Callable[[dict, int], object]):
        """
        Initialize adapter with data file.

        Args:
            data_path: Path to CSV, JSON or XLSX file
            parser: parse_system_row or parse_registry_row
        """
        super().__init__()
        self._data_path = Path(data_path)
        if not self._data_path.exists():
            raise FileNotFoundError(f"Record data file not found: {self._data_path}")

        for number, row in enumerate(_read_rows(self._data_path), start=1):
            record = parser(row, number)
            if record:
                self.add_record(record)


def load_system_records(path: str | Path) -> list[SystemRecord]:
    """Load system records from a file."""
    return FileRecordAdapter(path, parse_system_row).get_all_records()


def load_registry_records(path: str | Path) -> list[RegistryRecord]:
    """Load registry records from a file."""
    return FileRecordAdapter(path, parse_registry_row).get_all_records()


# ============== Pasted spreadsheet rows ==============

def _pasted_header(header: str) -> str:
    """Map a pasted column header to a PastedRecord field."""
    h = normalize_text(header)
    if "item" in h or "descri" in h:
        return "description"
    if "tombo" in h or "tombamento" in h or h == "tag":
        return "tag"
    if "local" in h:
        return "location"
    if "estado" in h or h == "state":
        return "state"
    return h


def _sniff_delimiter(header_line: str) -> str:
    if "\t" in header_line:
        return "\t"
    if header_line.count(";") > header_line.count(","):
        return ";"
    return ","


def parse_pasted_rows(text: str) -> list[PastedRecord]:
    """
    Parse rows copied from a spreadsheet (header row required).

    Completely empty rows are skipped. The state cell is reduced to one of
    the known states ("Bom (Doação X)" -> "Bom"); an empty state reads as
    "Regular". A tag of "S/T" means the row has no tag yet.

    Raises:
        ValueError: if there is no header row with a description column
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        return []

    reader = csv.DictReader(io.StringIO("\n".join(lines)), delimiter=_sniff_delimiter(lines[0]))
    reader.fieldnames = [_pasted_header(h) for h in (reader.fieldnames or [])]
    if "description" not in reader.fieldnames:
        raise ValueError("Pasted data has no description column")

    records = []
    for row in reader:
        description = (row.get("description") or "").strip()
        tag = (row.get("tag") or "").strip()
        location = (row.get("location") or "").strip()
        state_raw = (row.get("state") or "").strip()

        if not (description or tag or location or state_raw):
            continue

        state, _origin = parse_state_and_origin(state_raw)
        tag = normalize_tag(tag)
        records.append(PastedRecord(
            description=description or None,
            location=location,
            state=state,
            tag=tag if tag and tag != NO_TAG else None,
        ))

    return records
