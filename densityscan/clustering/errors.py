"""
聚类异常定义
配置错误、范围查询失败和不变量破坏
"""


class DBSCANError(Exception):
    """DBSCAN相关异常的基类"""


class ConfigurationError(DBSCANError, ValueError):
    """
    参数配置错误

    在运行开始前检测（min_samples < 1、半径非法、不支持的度量方式等），
    不会进行任何部分计算。
    """


class RangeQueryFailure(DBSCANError, RuntimeError):
    """
    范围查询在运行过程中失败

    原始异常保存在 __cause__ 中，本次运行被放弃，不返回任何结果。
    """

    def __init__(self, object_id, radius, message: str = None):
        self.object_id = object_id
        self.radius = radius
        if message is None:
            message = f"范围查询失败: id={object_id!r}, radius={radius!r}"
        super().__init__(message)


class InvariantViolation(DBSCANError, AssertionError):
    """聚类结果不再是输入集合的划分（算法缺陷，而非输入错误）"""
