#!/usr/bin/env python
"""Start the standalone MCP server in stdio mode"""

import os
import sys

# Add the src directory to the path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, os.path.join(project_root, 'src'))

from benchmcp.server.server import main

if __name__ == "__main__":
    # Logs go to the log file and stderr; stdout carries the protocol
    sys.exit(main(["--transport", "stdio"] + sys.argv[1:]))
