import sys

from chromakey.cli import main

sys.exit(main())
