"""
depgraph test suite.

Unit tests for the graph container, analysis algorithms, serialization
and configuration.
"""
