#!/usr/bin/env python3
"""
精度处理工具模块
统一报表中的百分比与平均分精度处理：
展示型汇总取整，导出行保留一位小数，平均分保留两位小数
"""
from typing import Union, Optional
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
import logging

logger = logging.getLogger(__name__)


def round_half_up(value: Union[float, int, None], digits: int = 0) -> Optional[float]:
    """
    四舍五入（半数进位），与前端 Math.round 行为一致，而非Python内置的银行家舍入

    Args:
        value: 需要处理的数值
        digits: 保留小数位数

    Returns:
        处理后的数值，None保持None
    """
    if value is None:
        return None

    try:
        if isinstance(value, str):
            if value.strip() == '' or value.lower() in ['null', 'none', 'nan']:
                return None
            value = float(value)

        decimal_value = Decimal(str(value))
        if decimal_value.is_nan():
            return None

        quantum = Decimal(1).scaleb(-digits)
        rounded_decimal = decimal_value.quantize(quantum, rounding=ROUND_HALF_UP)
        return float(rounded_decimal)
    except (ValueError, TypeError, InvalidOperation) as e:
        logger.warning(f"数值精度处理失败: {value}, 错误: {str(e)}")
        return None


def safe_percentage(obtained: Union[float, int], total: Union[float, int]) -> float:
    """
    计算得分百分比，满分为0时返回0（不抛异常、不产生NaN/Infinity）
    """
    if not total or total <= 0:
        return 0.0
    return float(obtained) * 100.0 / float(total)


def round_to(value: Union[float, int, None], digits: int) -> Union[int, float]:
    """按指定位数舍入，0位时返回整数，无效值按0处理"""
    rounded = round_half_up(value, digits)
    if rounded is None:
        rounded = 0.0
    return int(rounded) if digits <= 0 else rounded


def round_percentage(value: Union[float, int, None]) -> int:
    """展示型百分比：取整"""
    return round_to(value, 0)

