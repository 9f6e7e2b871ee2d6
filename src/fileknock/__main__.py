"""Allow ``python -m fileknock``."""

import sys

from fileknock.cli.main import main

sys.exit(main())
