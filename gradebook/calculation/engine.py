# 核心计算引擎
import pandas as pd
import numpy as np
import logging
from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional, Deque
from dataclasses import dataclass
import time
from collections import deque

from ..schemas.record_schemas import MARK_COLUMNS

logger = logging.getLogger(__name__)


class StatisticalStrategy(ABC):
    """统计计算策略抽象基类"""

    @abstractmethod
    def calculate(self, data: pd.DataFrame, config: Dict[str, Any]) -> Dict[str, Any]:
        """执行统计计算"""
        pass

    @abstractmethod
    def validate_input(self, data: pd.DataFrame, config: Dict[str, Any]) -> Dict[str, Any]:
        """验证输入数据"""
        pass

    @abstractmethod
    def get_algorithm_info(self) -> Dict[str, str]:
        """获取算法信息"""
        pass


@dataclass
class CalculationMetrics:
    """计算指标"""
    operation_name: str
    data_size: int
    execution_time: float
    success: bool
    error_message: Optional[str] = None


class PerformanceMonitor:
    """性能监控器"""

    def __init__(self, slow_threshold: float = 2.0, max_records: int = 1000):
        self.metrics: Deque[CalculationMetrics] = deque(maxlen=max_records)  # 只保留最近的记录
        self.slow_threshold = slow_threshold

    def record_calculation(self, operation: str, data_size: int,
                           execution_time: float, success: bool,
                           error: Optional[str] = None):
        """记录计算指标"""
        metric = CalculationMetrics(
            operation_name=operation,
            data_size=data_size,
            execution_time=execution_time,
            success=success,
            error_message=error
        )
        self.metrics.append(metric)

        if execution_time > self.slow_threshold:
            logger.warning(f"计算性能告警: {operation} 耗时 {execution_time:.2f}s")

    def get_stats(self) -> Dict[str, Any]:
        """获取性能统计"""
        if not self.metrics:
            return {}

        successful_metrics = [m for m in self.metrics if m.success]
        failed_metrics = [m for m in self.metrics if not m.success]

        return {
            'total_operations': len(self.metrics),
            'successful_operations': len(successful_metrics),
            'failed_operations': len(failed_metrics),
            'success_rate': len(successful_metrics) / len(self.metrics),
            'avg_execution_time': float(np.mean([m.execution_time for m in successful_metrics])) if successful_metrics else 0,
            'total_data_processed': sum(m.data_size for m in successful_metrics)
        }


class DataValidator:
    """成绩数据验证器"""

    def validate_marks(self, data: pd.DataFrame, required_columns: Optional[List[str]] = None) -> Dict[str, Any]:
        """
        验证成绩数据框

        空数据集是合法输入（汇总结果为空），只给出警告；
        非空数据缺少必需字段或出现负分时判定为无效。
        """
        validation_result = {
            'is_valid': True,
            'errors': [],
            'warnings': [],
            'stats': {}
        }

        if data.empty:
            validation_result['warnings'].append("数据集为空")
            validation_result['stats']['total_records'] = 0
            return validation_result

        required_columns = required_columns or MARK_COLUMNS
        missing_columns = [col for col in required_columns if col not in data.columns]
        if missing_columns:
            validation_result['is_valid'] = False
            validation_result['errors'].append(f"缺少必需字段: {missing_columns}")
            return validation_result

        obtained = pd.to_numeric(data['marks_obtained'], errors='coerce')
        total = pd.to_numeric(data['total_marks'], errors='coerce')

        invalid_count = int(obtained.isna().sum() + total.isna().sum())
        if invalid_count > 0:
            validation_result['warnings'].append(f"发现{invalid_count}个无效分数值")

        negative_count = int((obtained < 0).sum() + (total < 0).sum())
        if negative_count > 0:
            validation_result['is_valid'] = False
            validation_result['errors'].append(f"发现{negative_count}个负分值")

        zero_total_count = int((total == 0).sum())
        if zero_total_count > 0:
            validation_result['warnings'].append(f"发现{zero_total_count}条满分为0的记录，百分比按0处理")

        validation_result['stats'] = {
            'total_records': len(data),
            'students': int(data['student_id'].nunique()),
            'classes': int(data['class_id'].nunique())
        }
        return validation_result


class CalculationEngine:
    """统计计算引擎核心"""

    def __init__(self):
        self.strategies: Dict[str, StatisticalStrategy] = {}
        self.performance_monitor = PerformanceMonitor()

    def register_strategy(self, name: str, strategy: StatisticalStrategy):
        """注册计算策略"""
        self.strategies[name] = strategy
        logger.info(f"已注册计算策略: {name}")

    def calculate(self, strategy_name: str, data: pd.DataFrame,
                  config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """执行计算"""
        config = config or {}
        start_time = time.time()

        try:
            if strategy_name not in self.strategies:
                raise ValueError(f"未知的计算策略: {strategy_name}")

            strategy = self.strategies[strategy_name]

            validation_result = strategy.validate_input(data, config)
            if not validation_result['is_valid']:
                raise ValueError(f"数据验证失败: {validation_result['errors']}")

            result = strategy.calculate(data, config)

            result['_meta'] = {
                'algorithm_info': strategy.get_algorithm_info(),
                'data_size': len(data),
                'calculation_time': time.time() - start_time,
                'validation_warnings': validation_result.get('warnings', [])
            }

            self.performance_monitor.record_calculation(
                strategy_name, len(data), time.time() - start_time, True
            )
            return result

        except Exception as e:
            self.performance_monitor.record_calculation(
                strategy_name, len(data), time.time() - start_time, False, str(e)
            )
            raise

    def get_performance_stats(self) -> Dict[str, Any]:
        """获取性能统计"""
        return self.performance_monitor.get_stats()

    def reset_performance_stats(self):
        """重置性能统计"""
        self.performance_monitor = PerformanceMonitor()

    def get_strategy_info(self, strategy_name: str) -> Dict[str, Any]:
        """获取特定策略的元数据信息

        Raises:
            ValueError: 当策略不存在时
        """
        if strategy_name not in self.strategies:
            raise ValueError(f"策略 '{strategy_name}' 不存在")

        algorithm_info = self.strategies[strategy_name].get_algorithm_info()
        return {
            'name': strategy_name,
            'description': algorithm_info.get('description', '无描述'),
            'version': algorithm_info.get('version', '1.0'),
            'algorithm_info': algorithm_info
        }

    def get_registered_strategies(self) -> List[str]:
        """获取已注册的策略列表"""
        return list(self.strategies.keys())


# 全局计算引擎实例
_calculation_engine = None


def get_calculation_engine() -> CalculationEngine:
    """获取全局计算引擎实例"""
    global _calculation_engine
    if _calculation_engine is None:
        _calculation_engine = CalculationEngine()
        logger.info("已初始化全局计算引擎")
    return _calculation_engine
