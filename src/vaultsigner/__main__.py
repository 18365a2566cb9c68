"""Allow running as python -m vaultsigner."""

import sys

from vaultsigner.cli import main

sys.exit(main())
