"""
Reconciliation of corrected worklogs into personal sheets
"""
