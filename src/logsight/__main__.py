"""
LogSight CLI Entry Point

Allows running the package as a module: python -m logsight
"""

from logsight.cli import main

if __name__ == "__main__":
    main()
