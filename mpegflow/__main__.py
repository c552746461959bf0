import sys

from mpegflow.cli.mpegflow import main

sys.exit(main())
