#!/usr/bin/env python3
"""Build linkerd-inject.py — single-file distribution of the linkerd_inject package."""

import argparse
import re
import subprocess
import sys
from pathlib import Path

HERE = Path(__file__).parent
SRC_DIR = HERE / "src" / "linkerd_inject"
OUTPUT = HERE / "linkerd-inject.py"

INTERNAL_IMPORT_RE = re.compile(
    r'^\s*(?:from linkerd_inject[\w.]* import .+|import linkerd_inject[\w.]*)\s*$'
)

# Concatenation order respects the import graph
MODULES = [
    "core/constants.py",
    "core/errors.py",
    "core/types.py",
    "core/classify.py",
    "core/inject.py",
    "io/parsing.py",
    "io/output.py",
    "io/config.py",
    "core/pipeline.py",
    "cli.py",
]

THIRD_PARTY = {"yaml"}

SHEBANG = "#!/usr/bin/env python3\n"
DOCSTRING = '"""linkerd-inject — add the linkerd iptables init container to workload manifests."""\n'


def strip_main_guard(text: str) -> str:
    """Remove the trailing if __name__ == '__main__' block."""
    lines = text.splitlines(keepends=True)
    for i in range(len(lines) - 1, -1, -1):
        if lines[i].strip().startswith('if __name__'):
            return "".join(lines[:i])
    return text


def collect_imports_and_body(text: str) -> tuple[list[str], list[str]]:
    """Split module source into stdlib/external imports and body lines.

    The one-line module docstring and internal package imports are dropped.
    """
    lines = text.splitlines(keepends=True)
    if lines and lines[0].startswith('"""'):
        lines = lines[1:]

    imports = []
    body = []
    in_internal_import = False
    for line in lines:
        if in_internal_import:
            in_internal_import = ")" not in line
            continue
        if INTERNAL_IMPORT_RE.match(line):
            in_internal_import = line.rstrip().endswith("(")
            continue
        if line.startswith(("import ", "from ")):
            imports.append(line)
        else:
            body.append(line)
    return imports, body


def assemble(src_dir: Path) -> str:
    """Concatenate package modules into one script body."""
    all_imports: dict[str, str] = {}
    all_bodies: list[str] = []
    for mod_path in MODULES:
        full_path = src_dir / mod_path
        if not full_path.exists():
            print(f"Error: {full_path} not found", file=sys.stderr)
            sys.exit(1)
        imports, body = collect_imports_and_body(strip_main_guard(full_path.read_text()))
        for imp in imports:
            key = imp.strip()
            if key and key not in all_imports:
                all_imports[key] = imp
        section = mod_path.replace(".py", "").replace("/", ".")
        all_bodies.append(f"\n# --- {section} ---\n")
        all_bodies.extend(body)

    stdlib_imports = []
    thirdparty_imports = []
    for imp in all_imports.values():
        module = imp.strip().split()[1].split(".")[0]
        if module in THIRD_PARTY:
            thirdparty_imports.append(imp)
        else:
            stdlib_imports.append(imp)

    lines = [SHEBANG, DOCSTRING, "\n"]
    lines.extend(sorted(stdlib_imports))
    if thirdparty_imports:
        lines.append("\n")
        lines.extend(sorted(thirdparty_imports))
    lines.append("\n")
    lines.extend(all_bodies)
    lines.append('\n\nif __name__ == "__main__":\n')
    lines.append("    sys.exit(main())\n")
    return "".join(lines)


def main():
    parser = argparse.ArgumentParser(description="Build linkerd-inject.py distribution")
    parser.add_argument("--output", type=Path, default=OUTPUT,
                        help="Where to write the script (default: linkerd-inject.py)")
    parser.add_argument("--no-smoke-test", action="store_true",
                        help="Skip running the built script with --help")
    args = parser.parse_args()

    text = assemble(SRC_DIR)
    args.output.write_text(text)
    print(f"Built {args.output} ({sum(1 for l in text.splitlines() if l.strip())} non-empty lines)")

    if args.no_smoke_test:
        return
    result = subprocess.run(
        [sys.executable, str(args.output), "--help"],
        capture_output=True, text=True,
    )
    if result.returncode != 0:
        print(f"Smoke test FAILED:\n{result.stderr}", file=sys.stderr)
        sys.exit(1)
    print("Smoke test passed (--help)")


if __name__ == "__main__":
    main()
