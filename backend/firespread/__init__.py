"""
林火蔓延模拟后端。
"""

__version__ = "0.1.0"
