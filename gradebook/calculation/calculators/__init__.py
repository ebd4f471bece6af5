# 计算器模块
from .strategy_registry import (
    CalculationStrategyRegistry,
    register_default_strategies,
    initialize_calculation_system
)
from .grade_calculator import GradeConfig
from .performance_calculator import (
    StudentPerformanceStrategy,
    ClassPerformanceStrategy,
    ExamSummaryStrategy,
    GradeDistributionStrategy
)

__all__ = [
    'CalculationStrategyRegistry',
    'register_default_strategies',
    'initialize_calculation_system',
    'GradeConfig',
    'StudentPerformanceStrategy',
    'ClassPerformanceStrategy',
    'ExamSummaryStrategy',
    'GradeDistributionStrategy'
]
