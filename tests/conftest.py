import os

# 测试中不写日志文件
os.environ.setdefault("LOG_DISABLE_FILE", "true")
os.environ.setdefault("LOG_LEVEL", "WARNING")
