"""Allow ``python -m cryospace``."""

import sys

from .main import main

sys.exit(main())
