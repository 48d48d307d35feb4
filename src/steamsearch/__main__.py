import sys

from steamsearch import main

sys.exit(main())
