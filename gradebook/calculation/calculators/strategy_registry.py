# 策略注册表
import logging
from typing import Dict, Type, List, Any
from ..engine import StatisticalStrategy, CalculationEngine, get_calculation_engine
from .performance_calculator import (
    StudentPerformanceStrategy,
    ClassPerformanceStrategy,
    ExamSummaryStrategy,
    GradeDistributionStrategy
)

logger = logging.getLogger(__name__)


class CalculationStrategyRegistry:
    """计算策略注册表"""

    def __init__(self):
        self._strategies: Dict[str, Type[StatisticalStrategy]] = {}
        self._descriptions: Dict[str, str] = {}

    def register(self, name: str, strategy_class: Type[StatisticalStrategy], description: str = ""):
        """注册计算策略"""
        if not issubclass(strategy_class, StatisticalStrategy):
            raise ValueError(f"策略类 {strategy_class.__name__} 必须继承 StatisticalStrategy")

        self._strategies[name] = strategy_class
        self._descriptions[name] = description or strategy_class.__doc__ or "无描述"
        logger.info(f"已注册计算策略: {name} ({strategy_class.__name__})")

    def get_strategy(self, name: str) -> Type[StatisticalStrategy]:
        """获取策略类"""
        if name not in self._strategies:
            raise ValueError(f"未找到策略: {name}")
        return self._strategies[name]

    def create_strategy(self, name: str) -> StatisticalStrategy:
        """创建策略实例"""
        strategy_class = self.get_strategy(name)
        return strategy_class()

    def get_description(self, name: str) -> str:
        """获取策略描述"""
        self.get_strategy(name)
        return self._descriptions[name]

    def list_strategies(self) -> List[Dict[str, str]]:
        """列出所有已注册的策略"""
        return [
            {
                'name': name,
                'class_name': strategy_class.__name__,
                'description': self._descriptions[name]
            }
            for name, strategy_class in self._strategies.items()
        ]

    def is_registered(self, name: str) -> bool:
        """检查策略是否已注册"""
        return name in self._strategies

    def unregister(self, name: str) -> bool:
        """注销策略"""
        if name in self._strategies:
            del self._strategies[name]
            del self._descriptions[name]
            logger.info(f"已注销计算策略: {name}")
            return True
        return False

    def register_to_engine(self, engine: CalculationEngine):
        """将所有策略注册到计算引擎"""
        for name in self._strategies:
            strategy_instance = self.create_strategy(name)
            engine.register_strategy(name, strategy_instance)
            logger.debug(f"策略 {name} 已注册到计算引擎")


# 全局策略注册表
_registry = CalculationStrategyRegistry()


def register_strategy(name: str, strategy_class: Type[StatisticalStrategy], description: str = ""):
    """注册策略到全局注册表"""
    _registry.register(name, strategy_class, description)


def register_default_strategies():
    """注册默认的计算策略"""

    register_strategy(
        'student_performance',
        StudentPerformanceStrategy,
        '学生总评：汇总得分与满分，计算百分比和等级（不含小测）'
    )

    register_strategy(
        'class_performance',
        ClassPerformanceStrategy,
        '班级表现：各班总评百分比、学生数、成绩记录数，无成绩的班级不输出'
    )

    register_strategy(
        'exam_summary',
        ExamSummaryStrategy,
        '考试类型汇总：期初、期中、期末、小测、月考的得分率与参考人数'
    )

    register_strategy(
        'grade_distribution',
        GradeDistributionStrategy,
        '等级分布：全校学生总评等级A/B/C/D/F计数'
    )

    logger.info("默认计算策略注册完成")

    # 自动注册到全局计算引擎
    engine = get_calculation_engine()
    _registry.register_to_engine(engine)

    logger.info(f"已将 {len(_registry.list_strategies())} 个策略注册到计算引擎")


DEFAULT_STRATEGY_NAMES = ['student_performance', 'class_performance', 'exam_summary', 'grade_distribution']


def initialize_calculation_system() -> CalculationEngine:
    """初始化计算系统，默认策略已注册时直接返回全局引擎"""
    engine = get_calculation_engine()
    if all(name in engine.strategies for name in DEFAULT_STRATEGY_NAMES):
        return engine

    logger.info("正在初始化计算系统...")

    register_default_strategies()

    registered_strategies = engine.get_registered_strategies()
    logger.info(f"计算系统初始化完成，共注册 {len(registered_strategies)} 个策略: {registered_strategies}")

    return engine


def get_strategy_info(name: str) -> Dict[str, Any]:
    """获取策略详细信息"""
    if not _registry.is_registered(name):
        raise ValueError(f"策略 {name} 未注册")

    strategy_instance = _registry.create_strategy(name)
    algorithm_info = strategy_instance.get_algorithm_info()

    return {
        'name': name,
        'description': _registry.get_description(name),
        'class_name': _registry.get_strategy(name).__name__,
        'algorithm_info': algorithm_info
    }


def list_all_strategies() -> List[Dict[str, Any]]:
    """列出所有策略的详细信息"""
    return [get_strategy_info(info['name']) for info in _registry.list_strategies()]
