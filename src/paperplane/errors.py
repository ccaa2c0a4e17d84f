"""
构建号引擎的错误类型。

核心模块只抛出这些异常，不打印也不退出；由 CLI 统一转换为用户可见的错误信息。
"""


class BuildNumberError(RuntimeError):
    """构建号读取、计算或写回失败的基类。"""


class BuildNumberNotFoundError(BuildNumberError):
    """没有找到当前构建号，且未显式指定新构建号。"""


class MalformedInputError(BuildNumberError):
    """结构化文本无法解析。"""


class InvalidValueError(BuildNumberError):
    """构建号不是纯十进制数字，或新构建号不合法。"""


class UpdateFailedError(BuildNumberError):
    """写回时找不到读取阶段定位到的那一处构建号。"""
