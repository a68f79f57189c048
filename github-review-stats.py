#!/usr/bin/env python3
"""
GitHub Review Stats
Mirrors a repository's pull request reviews into a local cache and prints
per-reviewer statistics.
"""

from review_stats.cli import main


if __name__ == "__main__":
    main()
