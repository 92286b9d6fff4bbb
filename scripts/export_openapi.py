#!/usr/bin/env python3
"""
Write the OpenAPI document of the QuickCourt API to a YAML file.

The document is generated from the FastAPI app itself, so it always matches
the routes, operation ids and models in ``quickcourt/``.
"""

import argparse
import sys
from pathlib import Path

import yaml

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from quickcourt.main import app  # noqa: E402


def summarize(document: dict) -> None:
    """Print the operations found in the document."""
    paths = document.get("paths", {})
    schemas = document.get("components", {}).get("schemas", {})

    print(f"Found {len(schemas)} schemas and {len(paths)} paths:")
    for path, methods in sorted(paths.items()):
        for method, details in methods.items():
            if method.upper() in ["GET", "POST", "PUT", "DELETE", "PATCH"]:
                print(f"  - {method.upper():6} {path} -> {details.get('operationId')}")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument(
        "-o",
        "--output",
        default=str(project_root / "openapi.yaml"),
        help="Destination file (default: openapi.yaml in the project root)",
    )
    parser.add_argument("-q", "--quiet", action="store_true", help="Do not list operations")
    args = parser.parse_args()

    document = app.openapi()
    with open(args.output, "w") as f:
        yaml.safe_dump(document, f, sort_keys=False, allow_unicode=True)

    if not args.quiet:
        summarize(document)
    print(f"Wrote {args.output}")


if __name__ == "__main__":
    main()
