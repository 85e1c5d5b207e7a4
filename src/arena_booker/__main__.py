import sys

from arena_booker.cli import main

sys.exit(main())
