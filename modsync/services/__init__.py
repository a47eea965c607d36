"""服务层：同步引擎、远程注册表客户端、服务容器"""
