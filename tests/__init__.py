"""Test suite for the fcmpush client."""
