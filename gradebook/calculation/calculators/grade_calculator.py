# 成绩等级计算器
import pandas as pd
import logging
from typing import Dict, Any, List, Optional
from ..results import GradeDistribution
from ...utils.precision import safe_percentage, round_percentage
from ...database.enums import GRADE_SYMBOLS

logger = logging.getLogger(__name__)


class GradeConfig:
    """等级阈值配置类（基于百分比，下限包含）"""

    THRESHOLDS = {
        'A': 80.0,   # A ≥80%
        'B': 60.0,   # B 60-79%
        'C': 40.0,   # C 40-59%
        'D': 30.0,   # D 30-39%
        'F': 0.0     # F <30%
    }

    GRADE_NAMES = {
        'A': 'Excellent',
        'B': 'Very Good',
        'C': 'Good',
        'D': 'Pass',
        'F': 'Fail'
    }

    @classmethod
    def get_thresholds(cls) -> Dict[str, float]:
        """获取等级阈值配置"""
        return cls.THRESHOLDS.copy()

    @classmethod
    def get_grade_names(cls) -> Dict[str, str]:
        """获取等级名称映射"""
        return cls.GRADE_NAMES.copy()


def grade_for_percentage(percentage: float) -> str:
    """按百分比确定等级"""
    thresholds = GradeConfig.THRESHOLDS
    if percentage >= thresholds['A']:
        return 'A'
    elif percentage >= thresholds['B']:
        return 'B'
    elif percentage >= thresholds['C']:
        return 'C'
    elif percentage >= thresholds['D']:
        return 'D'
    return 'F'


def calculate_grade(obtained: float, total: float) -> str:
    """
    计算等级

    满分为0时百分比按0处理，返回F，不抛出异常。
    等级使用未取整的百分比判定。

    Args:
        obtained: 得分
        total: 满分

    Returns:
        A/B/C/D/F 之一
    """
    return grade_for_percentage(safe_percentage(obtained, total))


def calculate_individual_grade(obtained: float, total: float) -> Dict[str, Any]:
    """
    计算单条成绩的等级信息

    Returns:
        包含percentage(未取整)、display_percentage(取整)、grade、grade_name的字典
    """
    percentage = safe_percentage(obtained, total)
    grade = grade_for_percentage(percentage)
    return {
        'percentage': percentage,
        'display_percentage': round_percentage(percentage),
        'grade': grade,
        'grade_name': GradeConfig.GRADE_NAMES[grade]
    }


def batch_calculate_grades(data: pd.DataFrame, obtained_col: str = 'marks_obtained',
                           total_col: str = 'total_marks') -> pd.DataFrame:
    """
    批量计算逐条成绩的等级

    Args:
        data: 成绩数据
        obtained_col: 得分列名
        total_col: 满分列名

    Returns:
        增加percentage、grade列的数据框副本
    """
    result_data = data.copy()
    if result_data.empty:
        result_data['percentage'] = pd.Series(dtype=float)
        result_data['grade'] = pd.Series(dtype=object)
        return result_data

    obtained = pd.to_numeric(result_data[obtained_col], errors='coerce').fillna(0)
    total = pd.to_numeric(result_data[total_col], errors='coerce').fillna(0)

    result_data['percentage'] = [safe_percentage(o, t) for o, t in zip(obtained, total)]
    result_data['grade'] = result_data['percentage'].apply(grade_for_percentage)
    return result_data


def grade_distribution_from_grades(grades: List[Optional[str]]) -> GradeDistribution:
    """由等级列表生成等级分布，空值忽略"""
    distribution = GradeDistribution()
    for grade in grades:
        if grade in GRADE_SYMBOLS:
            distribution.add(grade)
    return distribution
