import sys

from cardex.cli import main

sys.exit(main())
