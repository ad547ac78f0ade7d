"""
Test suite for blockscan.

Covers the queue, result store, detectors, worker pipeline and CLI.
Shared fixtures live in conftest.py; fake Playwright objects in fakes.py.
"""
