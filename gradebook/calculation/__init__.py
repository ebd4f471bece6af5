# 学业表现汇总计算模块
from .engine import CalculationEngine, get_calculation_engine
from .calculators import (
    GradeConfig,
    register_default_strategies,
    initialize_calculation_system
)
from .calculators.grade_calculator import (
    calculate_grade,
    calculate_individual_grade,
    batch_calculate_grades
)
from .calculators.performance_calculator import (
    aggregate_student_performance,
    aggregate_class_student_performance,
    aggregate_class_performance,
    aggregate_exam_summary,
    aggregate_grade_distribution
)

__all__ = [
    'CalculationEngine',
    'get_calculation_engine',
    'GradeConfig',
    'register_default_strategies',
    'initialize_calculation_system',
    'calculate_grade',
    'calculate_individual_grade',
    'batch_calculate_grades',
    'aggregate_student_performance',
    'aggregate_class_student_performance',
    'aggregate_class_performance',
    'aggregate_exam_summary',
    'aggregate_grade_distribution'
]
