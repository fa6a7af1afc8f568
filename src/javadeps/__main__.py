import sys

from javadeps.cli import main

sys.exit(main())
