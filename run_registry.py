#!/usr/bin/env python3
"""
Student Registry - FastMCP Runner

Runs the stdio server from a source checkout.
"""

import subprocess
import sys
from pathlib import Path


def main() -> None:
    """Run the student registry server as a module."""
    project_root = Path(__file__).parent

    cmd = [sys.executable, "-m", "student_registry.server"]

    try:
        subprocess.run(cmd, cwd=project_root, check=True)
    except KeyboardInterrupt:
        print("\nServer stopped.")
    except subprocess.CalledProcessError as e:
        print(f"Error running server: {e}")
        sys.exit(e.returncode)


if __name__ == "__main__":
    main()
