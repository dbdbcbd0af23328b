"""Allow ``python -m redmag``."""

import sys

from redmag.cli import main

sys.exit(main())
