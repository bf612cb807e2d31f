import sys

from prompt_config.cli import main

sys.exit(main())
