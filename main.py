#!/usr/bin/env python3
"""
Gator - Command Line RSS Aggregator
===================================

Main application entry point; same commands as the ``gator`` script.

Usage:
    python main.py --help                    # Show all commands
    python main.py register <name>           # Create a user
    python main.py addfeed <name> <url>      # Add and follow a feed
    python main.py agg 1m                    # Poll feeds every minute
    python main.py browse 5                  # Show the 5 newest posts
"""

from gator.cli import main

if __name__ == "__main__":
    main()
