#!/usr/bin/env python3
"""
main.py — End-to-end Scratch project to JavaScript generation

This is the main entry point of the screcel compiler. It takes a Scratch 3
project document and generates JavaScript by:
1. Loading the project (local project.json, or a project URL found in the cache)
2. Building each target's block graph and reconstructing its scripts
3. Rendering the scripts as JavaScript and writing the output files

Usage:
    screcel <project.json | project URL> [-o output.js] [--graphml] [--ir]

Examples:
    screcel project.json                                        # -> output.js
    screcel project.json -o game.js --graphml --ir              # + debug dumps
    screcel https://scratch.mit.edu/projects/1182094620/        # cached project

Output:
    - <output>.js: Generated JavaScript
    - <output>_<target>.graphml: Block graph per target (with --graphml)
    - <output>.ir.xml: Reconstructed scripts (with --ir)
"""

import argparse
from pathlib import Path
from typing import List, Optional

from .codegen.backends.CodeGenerator import CodeGenerator
from .codegen.identifiers import sanitize
from .config import CompilerConfig, IdentifierScope
from .diagnostics import FORMATTERS, CompilerError, Diagnostics, DiagnosticsConfig
from .graph_builder.ProjectLoader import load_project
from .ir.serializer import IRSerializer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="screcel",
        description="Compile a Scratch 3 project into JavaScript.",
    )
    parser.add_argument("source", help="Path to project.json or a Scratch project URL")
    parser.add_argument("-o", "--output", default="output.js",
                        help="JavaScript output file (default: output.js)")
    parser.add_argument("--graphml", action="store_true",
                        help="Also write each target's block graph as GraphML")
    parser.add_argument("--ir", action="store_true",
                        help="Also write the reconstructed scripts as XML")
    parser.add_argument("--identifier-scope", choices=[s.value for s in IdentifierScope],
                        default=IdentifierScope.PROGRAM.value,
                        help="Share identifiers across targets (program) or not (target)")
    parser.add_argument("--cache-dir", default=None,
                        help="Directory holding cached projects-<id>.json files")
    parser.add_argument("--json-diagnostics", action="store_true",
                        help="Print diagnostics as JSON lines")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for project to JavaScript generation.

    Process:
    1. Parse arguments and configure diagnostics
    2. Load the project document
    3. Reconstruct and render every target
    4. Write JavaScript (and optional GraphML / IR dumps)

    Returns 0 on success and 1 when compilation fails; nothing is written
    on failure.
    """
    args = build_parser().parse_args(argv)

    formatter = FORMATTERS["json" if args.json_diagnostics else "human"]
    diagnostics = Diagnostics(DiagnosticsConfig(formatter=formatter))

    config = CompilerConfig(identifier_scope=args.identifier_scope)
    if args.cache_dir is not None:
        config.cache_dir = Path(args.cache_dir)
    output_path = Path(args.output)

    print("=" * 70)
    print("Screcel Code Generation System")
    print("=" * 70)
    print()

    try:
        # Step 1: Load project
        print("[1/3] Loading Scratch project...")
        print(f"      Input: {args.source}")
        project = load_project(args.source, config.cache_dir)
        block_count = sum(len(target.blocks) for target in project.targets)
        print(f"      Targets: {len(project.targets)}, blocks: {block_count}")
        print()

        # Step 2: Reconstruct scripts and render JavaScript
        print("[2/3] Reconstructing scripts and generating JavaScript...")
        generator = CodeGenerator(project, config, diagnostics)
        code = generator.generate()
        for name, units in generator.units.items():
            print(f"      Target '{name}': {len(generator.graphs[name])} blocks, "
                  f"{len(units)} scripts")
        print()
    except CompilerError as e:
        diagnostics.error(e.code, msg=str(e), **e.context)
        print(f"      ERROR: {type(e).__name__}: {e}")
        return 1

    # Step 3: Write outputs
    print("[3/3] Writing output files...")
    output_path.write_text(code + "\n", encoding="utf-8")
    written = [output_path]

    if args.graphml:
        for name, graph in generator.graphs.items():
            graphml_path = output_path.parent / f"{output_path.stem}_{sanitize(name)}.graphml"
            written.append(graph.to_graphml(graphml_path))

    if args.ir:
        ir_path = output_path.with_suffix(".ir.xml")
        written.append(IRSerializer().serialize_to_file(generator.units, ir_path))

    for path in written:
        print(f"      Output: {path}")
    print(f"      Generated: {len(code.splitlines())} lines of JavaScript")
    print()

    print("=" * 70)
    print("[SUCCESS] Code generation completed successfully!")
    print("=" * 70)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
