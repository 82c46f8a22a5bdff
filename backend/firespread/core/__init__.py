"""
核心模块：配置、存储、任务管理。
"""
