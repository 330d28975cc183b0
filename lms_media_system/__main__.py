"""
Entry point for running the LMS Media System as a module.
"""

from .main import main

if __name__ == "__main__":
    main()
