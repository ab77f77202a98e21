import os
import sys

# the cli package lives outside the source root, make it importable when the
# project is not installed
CLI_DIR = os.path.join(os.path.dirname(__file__), '..', '..', 'cli')
if os.path.abspath(CLI_DIR) not in sys.path:
    sys.path.insert(0, os.path.abspath(CLI_DIR))
