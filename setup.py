#!/usr/bin/env python
"""Setup script for service-scan.

Kept for tools that don't support PEP 517; package metadata lives in
pyproject.toml.
"""

from setuptools import setup

if __name__ == "__main__":
    setup()
