import sys

from tunkrank.cli import main

sys.exit(main())
