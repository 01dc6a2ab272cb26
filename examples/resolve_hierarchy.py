#!/usr/bin/env python3
"""Example: resolve SYS_CPN and Ttl. Usage for SAP BOM exports.

Accepts files (.xls, .xlsx, .csv), folders, or .zip archives of .xls exports,
resolves every file against a JSON config and writes one merged table.
"""

import logging

from bomrollup import BomConsolidator, BomParser, load_config


def resolve_boms(config_file: str, output_file: str, inputs):
    """Resolve and merge BOM exports.

    Args:
        config_file: JSON file with pattern / special_rules / precedence
        output_file: Path to the merged output (.csv, .xlsx or .json)
        inputs: Files, folders or ZIP archives
    """
    config = load_config(config_file)
    consolidator = BomConsolidator(config, skip_errors=True)

    rows, report = consolidator.consolidate(inputs)
    if not rows:
        print("✗ No rows were resolved")
        return rows

    BomParser().export(rows, output_file)

    stats = report.statistics.to_dict()
    print(f"✓ Files: {report.file_count}  Rows: {report.total_rows}")
    print(f"✓ Time: {report.elapsed_ms:.0f} ms "
          f"({report.avg_ms_per_file:.0f} ms/file, {report.rows_per_second:.0f} rows/sec)")
    print(f"✓ SYS_CPN changed: {stats['changed']} ({stats['changed_percent']}%)")
    print(f"  Ttl. Usage avg={stats['usage_mean']} min={stats['usage_min']} "
          f"max={stats['usage_max']} std={stats['usage_std']}")

    if report.diagnostics:
        print(f"\n⚠ {len(report.diagnostics)} data-quality diagnostics:")
        for diagnostic in report.diagnostics[:20]:
            print(f"  - {diagnostic.kind}: {diagnostic.material} (LN {diagnostic.sequence})")
    for label, error in report.failed:
        print(f"✗ {label}: {error}")

    print(f"✓ Output saved to: {output_file}")
    return rows


if __name__ == "__main__":
    import sys

    if len(sys.argv) < 4:
        print("Usage: python resolve_hierarchy.py <config.json> <output_file> <input> [<input> ...]")
        print("\nExample:")
        print("  python resolve_hierarchy.py config.json merged.xlsx exports.zip")
        sys.exit(1)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    resolve_boms(sys.argv[1], sys.argv[2], sys.argv[3:])
