"""Allow ``python -m todo_tui``."""

import sys

from .tui.cli import main

sys.exit(main())
