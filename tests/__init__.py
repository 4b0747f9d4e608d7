"""Test suite for the consensus backtester.

Test packages mirror the layout of ``consensus_backtester``.
"""
