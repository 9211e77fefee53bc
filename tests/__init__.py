"""Test suite for Drop Zone."""
