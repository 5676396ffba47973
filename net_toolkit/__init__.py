"""
net_toolkit: concurrent TCP reconnaissance.

Full-connect port scanning across a network block or a single host,
banner grabbing, and local listening-port inventory.
"""

__version__ = "1.1.0"
