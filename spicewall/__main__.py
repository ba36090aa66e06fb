"""Run the spicewall command with `python -m spicewall`."""

import sys

from .cli import main

sys.exit(main())
