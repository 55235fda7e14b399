#!/usr/bin/env python3
"""
Bank Portal Entry Point

Starts the FastAPI server with the bank portal API.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from bank_portal.api import run_server
from bank_portal.config import get_config


if __name__ == "__main__":
    config = get_config()
    print("Starting Bank Portal...")
    print(f"API available at: http://localhost:{config.api_port}{config.api_prefix}")
    print(f"Documentation at: http://localhost:{config.api_port}/docs")
    print()

    try:
        run_server(debug=False)
    except KeyboardInterrupt:
        print("\nShutting down Bank Portal...")
