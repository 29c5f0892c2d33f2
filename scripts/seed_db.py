from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from campus_attendance.database.bootstrap import apply_seed_sql


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    seed_path = REPO_ROOT / "database" / "seed.sql"
    statements = apply_seed_sql(db_config, seed_path=seed_path)

    print(
        "OK: Seeded directory data -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(statements={statements})"
    )


if __name__ == "__main__":
    main()
