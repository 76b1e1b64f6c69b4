import sys

from babble.cli import main

sys.exit(main())
