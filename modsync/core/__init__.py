"""核心层：数据模型、内容指纹、扫描 / 合并 / 解析 / 安装"""
