"""Allow `python -m lox`."""
from .cli import main

raise SystemExit(main())
