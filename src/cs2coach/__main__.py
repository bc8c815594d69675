"""
cs2coach CLI Entry Point

Allows running the package as a module: python -m cs2coach
"""

from cs2coach.cli import main

if __name__ == "__main__":
    main()
