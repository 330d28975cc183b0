#!/usr/bin/env python3
"""
Main entry point for the LMS Media System.

This script opens storage and starts the API server that streams course videos.
"""

import sys
import os

# Add the current directory to Python path to import our modules
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from lms_media_system.main import main

if __name__ == "__main__":
    main()
