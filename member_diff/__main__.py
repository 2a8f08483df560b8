import sys

from member_diff.cli import main


sys.exit(main())
