import sys

from pairsignal.cli.server import main

sys.exit(main())
