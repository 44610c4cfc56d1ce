"""统一业务异常模型。

管道内部的失败以 Result 值传递，不走异常；这里的异常只用于
启动期配置错误，以及服务入口处的兜底转换。
"""


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "INVALID_CONFIG"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 500。
        extra: 其他补充字段。
    """

    def __init__(self, code: str, message: str, http_status: int = 500, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class ConfigError(BusinessError):
    """配置加载或校验失败。"""
