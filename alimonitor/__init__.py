"""
Alimonitor: extração normalizada de dados de produtos do AliExpress.
"""

__version__ = "1.0.0"
