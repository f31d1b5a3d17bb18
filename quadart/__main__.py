"""Allow ``python -m quadart``."""

from quadart.cli import main

raise SystemExit(main())
