"""modsync - 本地模组目录同步与更新引擎"""

__version__ = "0.3.0"
