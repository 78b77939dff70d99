#!/usr/bin/env python3
"""
Write the Blog Posting Service OpenAPI document to openapi.json.

Usage:
    python scripts/generate_openapi.py [output_path]
"""
import json
import os
import sys
from typing import Optional

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from apps.blog.main import app  # noqa: E402


def main(argv: Optional[list[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    output = args[0] if args else "openapi.json"
    document = app.openapi()
    document["servers"] = [
        {"url": os.getenv("BLOG_POSTING_SERVICE_URL", "http://localhost:8000")}
    ]

    with open(output, "w") as f:
        json.dump(document, f, indent=2)
    print(f"OpenAPI document generated at {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
