# tests/property/__init__.py
"""Property-based tests for pipeforge.

Property-based testing validates invariants that must hold for ALL inputs,
not just the specific examples we think of.

Test categories:
- test_graph_properties: topological ordering and cycle detection
- test_operator_properties: list and string operators
- test_security_properties: private-network and ReDoS guards
"""
