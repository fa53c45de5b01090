from __future__ import annotations

from montecarlo.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
