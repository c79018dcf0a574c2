"""Runs the chat session client with repository-relative imports."""

from __future__ import annotations

import sys
from pathlib import Path


def main() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root))

    # Lazy import after adjusting sys.path
    from chatclient.bootstrap import main as run_client  # type: ignore

    run_client()


if __name__ == "__main__":
    main()
