"""Entry point for python -m fade."""

import sys

from fade.viewer.app import main

sys.exit(main())
