from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import load_settings

from src.vacation_system.vacation_system.container import build_container
from src.vacation_system.vacation_system.database.bootstrap import apply_seed_sql


def main() -> None:
    settings = load_settings()
    db_config = dict(settings.DB_CONFIG)

    seed_path = REPO_ROOT / "database" / "seed.sql"
    apply_seed_sql(db_config, seed_path=seed_path)

    # Seeded policies only define allowances; give every active employee a balance.
    container = build_container(db_config=db_config, lock_backend="thread", holiday_source="static")
    for policy in container.policy_service.list_policies():
        result = container.balance_ledger.bulk_assign(policy.policy_id, policy.year)
        print(f"  {policy.name}: created={result.created} skipped={result.skipped}")

    print(
        "OK: Seeded database -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


if __name__ == "__main__":
    main()
