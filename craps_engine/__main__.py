"""
Module entrypoint:

  python -m craps_engine validate path/to/rules.yaml
  python -m craps_engine play --dice 3,4 6,6 --bet alice:pass:10
"""
from __future__ import annotations

from .cli import main

if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
