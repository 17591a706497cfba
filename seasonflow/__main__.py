"""Entry point: python -m seasonflow"""

import sys

from seasonflow.cli import main

sys.exit(main())
