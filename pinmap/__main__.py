import sys

from pinmap.cli.main import main

sys.exit(main())
