"""I/O utilities for CSV import/export."""

from .import_csv import import_assignments_csv, import_staff_csv, read_assignments_csv, read_staff_csv
from .export_csv import export_assignments_csv, write_assignments_csv

__all__ = [
    "import_staff_csv",
    "import_assignments_csv",
    "read_staff_csv",
    "read_assignments_csv",
    "export_assignments_csv",
    "write_assignments_csv",
]
