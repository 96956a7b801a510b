import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from glucoguide import create_app
from glucoguide.leaderboard import reconcile_leaderboard
from glucoguide.store import get_store


def main():
    app = create_app()
    with app.app_context():
        count = reconcile_leaderboard(get_store())
        print(f"Rebuilt {count} leaderboard entries from user profiles")


if __name__ == "__main__":
    main()
