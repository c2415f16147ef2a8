"""Allow `python -m mezzofanti extract ...`."""

import sys

from mezzofanti.cli import main

sys.exit(main())
