import sys

from gitea_declarative.cli import main

sys.exit(main())
