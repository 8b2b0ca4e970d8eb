"""Allow ``python -m modmake``."""

import sys

from modmake.cli import main

sys.exit(main())
