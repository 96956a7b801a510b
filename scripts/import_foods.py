import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from glucoguide import create_app
from glucoguide.food_catalog import import_reference_foods, seed_reference_foods_if_needed


def main():
    parser = argparse.ArgumentParser(
        description="Import reference foods (per 100g values) from JSON files or URLs."
    )
    parser.add_argument(
        "sources",
        nargs="*",
        help="JSON file paths or http(s) URLs. Defaults to REFERENCE_FOODS_URL when set.",
    )
    parser.add_argument(
        "--skip-seed",
        action="store_true",
        help="Do not sync the built-in reference foods first.",
    )
    args = parser.parse_args()

    app = create_app()
    with app.app_context():
        if not args.skip_seed:
            seed_reference_foods_if_needed()

        sources = args.sources or [app.config.get("REFERENCE_FOODS_URL")]
        sources = [source for source in sources if source]
        if not sources:
            print("No sources given and REFERENCE_FOODS_URL is not set; built-in foods only.")
            return

        total = 0
        for source in sources:
            imported = import_reference_foods(source)
            total += imported
            print(f"{source}: imported {imported}")
        print(f"Total imported: {total}")


if __name__ == "__main__":
    main()
