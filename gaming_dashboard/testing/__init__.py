"""Test doubles shared by the test suite and local smoke runs."""
