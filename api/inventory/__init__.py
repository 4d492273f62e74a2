"""
Inventory lookup: one fuzzy match over the store's stock table.
"""
