# tableflow/modules/tables/__init__.py

"""
Table occupancy and service priority.
"""
