"""Example: drive the vacation engine through its services, without Flask.

Controllers are thin; every rule lives in the services wired by the container.
"""

from datetime import date

from config import load_settings

from src.vacation_system.vacation_system.container import build_container


def main():
    settings = load_settings()
    container = build_container(db_config=settings.DB_CONFIG, lock_backend="thread")

    preview = container.request_service.validate(3, date(2026, 8, 3), date(2026, 8, 7))
    print("valid:", preview.is_valid, "days:", preview.working_days, "errors:", preview.errors)
    if not preview.is_valid:
        return

    req = container.request_service.create(employee_id=3, start_date=date(2026, 8, 3), end_date=date(2026, 8, 7))
    req = container.request_service.submit(req.request_id, employee_id=3)
    print("submitted:", req.request_id, req.status.value)
    print("balance:", container.balance_ledger.get_balance(3, 2026))


if __name__ == "__main__":
    main()
