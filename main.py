#!/usr/bin/env python3
"""
Main entry point for the YouTube channel analytics CLI
"""

from channel_insights.cli import run

if __name__ == "__main__":
    run()
