"""
Processors: the pure engines of the expense-intake pipeline.
"""
