import sys

from mcp_connectors.app import main


sys.exit(main())
