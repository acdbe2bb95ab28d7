import sys

from kb_matcher.cli import main


sys.exit(main())
