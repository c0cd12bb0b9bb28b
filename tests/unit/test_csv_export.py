import csv
import io
from datetime import datetime

from placement_portal.core.constants import ApplicationStatus
from placement_portal.utils.csv_export import generate_csv


def test_generate_csv_formats_cells() -> None:
    rows = [
        {
            "name": "Asha, K",
            "status": ApplicationStatus.shortlisted,
            "applied_at": datetime(2025, 1, 2, 3, 4, 5),
            "skills": ["Python", "SQL"],
            "cgpa": None,
        }
    ]
    columns = [("Name", "name"), ("Status", "status"), ("Applied", "applied_at"), ("Skills", "skills"), ("CGPA", "cgpa")]

    parsed = list(csv.reader(io.StringIO(generate_csv(rows, columns))))

    assert parsed[0] == ["Name", "Status", "Applied", "Skills", "CGPA"]
    assert parsed[1] == ["Asha, K", "shortlisted", "2025-01-02T03:04:05", "Python; SQL", ""]


def test_generate_csv_with_no_rows_writes_header_only() -> None:
    content = generate_csv([], [("Roll Number", "roll_number")])
    assert content.strip() == "Roll Number"


def test_generate_csv_neutralises_formula_cells() -> None:
    rows = [{"name": "=HYPERLINK(\"http://x\")", "phone": "+919876543210", "email": "@admin", "skills": ["-rm", "SQL"], "cgpa": -1}]
    columns = [("Name", "name"), ("Phone", "phone"), ("Email", "email"), ("Skills", "skills"), ("CGPA", "cgpa")]

    parsed = list(csv.reader(io.StringIO(generate_csv(rows, columns))))

    assert parsed[1] == ["'=HYPERLINK(\"http://x\")", "'+919876543210", "'@admin", "'-rm; SQL", "-1"]
