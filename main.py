#!/usr/bin/env python3
"""
Main entry point for AWS Assume Role CLI
"""

import sys
from pathlib import Path

# Add the package to Python path
sys.path.insert(0, str(Path(__file__).parent))

from aws_assume_role.cli import run


if __name__ == '__main__':
    run()
