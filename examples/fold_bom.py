#!/usr/bin/env python3
"""Example: fold a level-annotated BOM and inspect the result.

Reads a flat BOM file, prints the assembly tree, lists every parent -> child
entry, and optionally writes the two ItemSync tables.
"""

from pathlib import Path

from bomfold import BomFolder, FoldRules, render_forest, write_tables


def fold_bom(input_file: str, output_dir: str = None, sub_boms: bool = False):
    """Fold a BOM file and report what was found.

    Args:
        input_file: Path to the flat BOM file (.csv, .tsv or .xlsx)
        output_dir: Where to write boms.csv and bom_entries.csv (optional)
        sub_boms: Also list nested sub-assemblies in the BOMs table
    """
    folder = BomFolder(rules=FoldRules(include_sub_boms=sub_boms))
    result = folder.fold_file(input_file)

    print(render_forest(result.forest))
    print(f"\n{len(result.boms)} BOM(s), {len(result.bom_entries)} entr(ies)")
    for entry in result.bom_entries:
        print(f"  [{entry.root_part_number}] {entry.parent_part_number} -> "
              f"{entry.child_part_number} x {entry.quantity:g} ({entry.entry_type})")

    if output_dir:
        for path in write_tables(result.boms, result.bom_entries, output_dir):
            print(f"Wrote {path}")

    return result


if __name__ == "__main__":
    import sys

    args = [a for a in sys.argv[1:] if a != "--sub-boms"]
    default_input = Path(__file__).parent / "sample_bom.csv"
    input_file = args[0] if args else str(default_input)
    output_dir = args[1] if len(args) > 1 else None

    fold_bom(input_file, output_dir, sub_boms="--sub-boms" in sys.argv)
