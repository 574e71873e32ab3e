import sys

from carve.main import main

sys.exit(main())
