import sys

from pathcomplete.main import main

sys.exit(main())
