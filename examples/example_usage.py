"""Example: drive the service layer directly (no Flask).

Signs in the demo student, checks in, then prints the last 30 days of
attendance statistics. Run ``scripts/seed_db.py`` first.
"""

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT / "src") not in sys.path:
    sys.path.insert(0, str(REPO_ROOT / "src"))

from hostel_system.container import build_container
from hostel_system.core.exceptions import DuplicateCheckInError
from hostel_system.settings import get_settings_module


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    ctx = container.auth_service.new_context()
    sub = ctx.subscribe(lambda event, c: print(f"session event: {event.value}"))
    try:
        profile = container.auth_service.sign_in(ctx, "student@hostel.local", "student123")
        try:
            container.attendance_service.check_in(profile)
        except DuplicateCheckInError as e:
            print(e)
        print(container.attendance_service.compute_statistics(profile))
        container.auth_service.sign_out(ctx)
    finally:
        sub.unsubscribe()


if __name__ == "__main__":
    main()
