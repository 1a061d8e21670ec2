import sys

from autoswap.cli import main

sys.exit(main())
