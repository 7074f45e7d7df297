# src/phasekit/__main__.py
import sys

from phasekit.cli import main

sys.exit(main())
