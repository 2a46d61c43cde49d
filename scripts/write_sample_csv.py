"""Write simulated wearable readings to a CSV file for ``physio-monitor replay``.

Usage::

    python scripts/write_sample_csv.py data/sample.csv --count 240 --seed 42
"""

import argparse
import csv
from pathlib import Path

from physio_monitor.collectors.simulator import ReadingSimulator


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("output")
    parser.add_argument("--count", type=int, default=240)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()

    out = Path(args.output)
    out.parent.mkdir(parents=True, exist_ok=True)

    readings = ReadingSimulator(seed=args.seed).generate(args.count)
    with out.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["time", "heart_rate", "skin_temp", "sweat_level"])
        for r in readings:
            writer.writerow([r.timestamp.isoformat(), r.heart_rate, r.skin_temp, r.sweat_level])

    print(f"Wrote {len(readings)} readings to {out}")


if __name__ == "__main__":
    main()
