"""Regenerate the Round-of-32 combination table from the official possibilities CSV.

Usage:
    python build_combination_table.py possibilities.csv [out.json]

Writes wc26/data/round_of_32_combinations.json by default.
"""
import logging
import sys
from pathlib import Path

sys.path.insert(0, ".")
from wc26.config import DEFAULT_TABLE_PATH
from wc26.services.combination_csv import parse_combinations_csv
from wc26.services.combination_table import CombinationTable, dump_combination_table, table_coverage

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

if len(sys.argv) < 2:
    print(__doc__)
    sys.exit(1)

csv_path = Path(sys.argv[1])
out_path = Path(sys.argv[2]) if len(sys.argv) > 2 else DEFAULT_TABLE_PATH

result = parse_combinations_csv(csv_path.read_text(encoding="utf-8-sig"))
table = CombinationTable(result.entries, source=csv_path.name)
out_path.write_text(dump_combination_table(table) + "\n", encoding="utf-8")

coverage = table_coverage(table)
print(f"Parsed rows: {len(result.entries) + len(result.skipped)}")
print(f"Entries written: {coverage['populated']}/{coverage['total']}")
print(f"Skipped rows: {len(result.skipped)}")
for s in result.skipped:
    print(f"  line {s.line_number}: {s.reason}")
print(f"Output: {out_path}")
