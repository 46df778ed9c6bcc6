#!/usr/bin/env python3
"""
Run the Local API Docs server straight from a checkout.
Settings come from local.env in the current directory.
"""

import sys
from pathlib import Path

# Add the src directory to Python path
src_dir = Path(__file__).parent / "src"
sys.path.insert(0, str(src_dir))


def main():
    """Run the Local API Docs server."""
    from api_docs.main import main as run_server

    run_server()


if __name__ == "__main__":
    main()
