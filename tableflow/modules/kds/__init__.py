# tableflow/modules/kds/__init__.py

"""
Kitchen Display System (KDS) module: live bar and kitchen boards.
"""
