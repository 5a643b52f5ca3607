"""
Synthetic Territory Dataset Generator
Writes a sales export CSV and a displays JSON document readable by the CLI.
"""

import argparse
from datetime import date
from pathlib import Path

from dealer_insights.data import TerritoryGenerator
from dealer_insights.ingestion import write_displays, write_sales_export

OUTPUT_DIR = Path(__file__).parent.parent / "data" / "generated"


def main():
    parser = argparse.ArgumentParser(description="Generate a synthetic dealer territory")
    parser.add_argument("--dealers", type=int, default=12, help="Number of showrooms")
    parser.add_argument("--collections", type=int, default=20, help="Number of collections")
    parser.add_argument("--end-date", type=date.fromisoformat, default=None, help="Last order date")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--output", type=Path, default=OUTPUT_DIR, help="Output directory")
    args = parser.parse_args()

    args.output.mkdir(parents=True, exist_ok=True)
    dataset = TerritoryGenerator(seed=args.seed).generate(
        n_dealers=args.dealers,
        n_collections=args.collections,
        end_date=args.end_date,
    )

    write_sales_export(dataset.orders, args.output / "sales.csv", dataset.descriptions)
    print(f"sales.csv: {len(dataset.orders):,} order lines")

    write_displays(dataset.displays, args.output / "displays.json")
    print(f"displays.json: {len(dataset.displays):,} displays")


if __name__ == "__main__":
    main()
