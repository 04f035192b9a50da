# tableflow/modules/orders/__init__.py

"""
Order submission, item routing and the order lifecycle.
"""
