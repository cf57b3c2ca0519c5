import sys

from .updater_cli import main

sys.exit(main())
