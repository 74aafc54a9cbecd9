"""Entry point for ``python -m gostrictenum``."""

from gostrictenum.main import main

if __name__ == "__main__":
    raise SystemExit(main())
