#!/usr/bin/env python3
"""Main entry point for the queueing system simulation package."""

from nhpp_queue.scripts.run_simulation import main

if __name__ == '__main__':
    main()
