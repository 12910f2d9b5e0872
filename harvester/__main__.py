import sys

from harvester.main import main

sys.exit(main())
