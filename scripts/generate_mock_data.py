"""
generate_mock_data.py
─────────────────────
Writes a synthetic Brazzaville dataset (200 houses, 10 zones) to JSON so it
can be inspected or loaded elsewhere without starting the dashboard.

Run from repo root:
    python scripts/generate_mock_data.py --seed 42
    python scripts/generate_mock_data.py --out /tmp/brazzaville
"""

import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from powermap.data import generate_dataset, to_records  # noqa: E402


def write_dataset(out_dir: Path, seed=None) -> tuple[Path, Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    houses, zones = generate_dataset(seed)

    houses_path = out_dir / "houses.json"
    zones_path  = out_dir / "zones.json"
    houses_path.write_text(json.dumps(to_records(houses), indent=2, ensure_ascii=False),
                           encoding="utf-8")
    zones_path.write_text(json.dumps(to_records(zones), indent=2, ensure_ascii=False),
                          encoding="utf-8")
    return houses_path, zones_path


def main(argv=None):
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")

    parser = argparse.ArgumentParser(description="Export a synthetic Brazzaville dataset.")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--out", type=Path, default=ROOT / "data")
    args = parser.parse_args(argv)

    houses_path, zones_path = write_dataset(args.out, args.seed)
    print(f"✓  {houses_path.name}")
    print(f"✓  {zones_path.name}")
    print(f"\n  Dataset written to {args.out}")
    print("  Run:  python -m powermap.viz.app")


if __name__ == "__main__":
    main()
