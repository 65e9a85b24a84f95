import sys

from monitor_api.cli import main

sys.exit(main())
