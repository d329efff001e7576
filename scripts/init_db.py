from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.hris_payroll.hris_payroll.database.bootstrap import apply_schema, list_tables

HRIS_TABLES = (
    "companies",
    "subscriptions",
    "holidays",
    "salary_profiles",
    "employees",
    "attendance_records",
    "leave_requests",
    "payrolls",
    "audit_logs",
)


def main() -> int:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)
    target = f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    present = set(list_tables(db_config))

    print(f"HRIS schema applied to {target}")
    for name in HRIS_TABLES:
        print(f"  [{'x' if name in present else ' '}] {name}")

    missing = [name for name in HRIS_TABLES if name not in present]
    if missing:
        print(f"Missing tables: {', '.join(missing)}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
