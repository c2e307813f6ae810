"""Azure Resource Provider Report - tenant-wide provider usage and compliance"""

__version__ = "1.0.0"
