# tableflow/modules/menu/__init__.py

"""
Menu catalog with bar or kitchen destinations.
"""
