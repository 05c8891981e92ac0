"""Pytest configuration for the hashmap_lib test suite.

Puts the repo root on sys.path so `hashmap_lib` imports from the working
tree even when the package is not installed.
"""
import sys
from pathlib import Path


def pytest_configure(config):
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root))
