"""
aggir: typed intermediate representation for analytic SQL aggregate expressions.
"""
