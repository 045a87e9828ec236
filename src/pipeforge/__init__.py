"""
pipeforge: validate and execute node-based data pipes.

A pipe is a directed graph of operator nodes (fetch sources, user inputs,
filters, string transforms) that is checked for structural integrity and
then executed in dependency order.
"""

__version__ = "0.1.0"
