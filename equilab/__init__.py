"""
equilab: Texas Hold'em equity calculator

Computes win/tie/equity figures for two or more players, given exact hole
cards or weighted ranges and a partial board, by exact enumeration of the
remaining runouts or by seeded Monte Carlo sampling.
"""

__version__ = "0.1.0"
