"""Solvers for the tube sorter, and the loop that drives them."""
