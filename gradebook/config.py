# 报表配置
import os
import logging
from dataclasses import dataclass, field
from typing import List, FrozenSet, Optional

from .database.enums import EXAM_TYPES, DEFAULT_EXCLUDED_EXAM_TYPES

logger = logging.getLogger(__name__)


def _split_env_list(value: Optional[str]) -> List[str]:
    """解析逗号分隔的环境变量"""
    if not value:
        return []
    return [item.strip() for item in value.split(',') if item.strip()]


@dataclass
class ReportConfig:
    """报表配置数据类，显式传入报表服务"""
    exam_types: List[str] = field(default_factory=lambda: list(EXAM_TYPES))
    excluded_exam_types: FrozenSet[str] = DEFAULT_EXCLUDED_EXAM_TYPES
    display_precision: int = 0      # 汇总展示百分比：取整
    export_precision: int = 1       # 导出行百分比：一位小数
    average_precision: int = 2      # 平均分：两位小数

    @classmethod
    def from_env(cls) -> "ReportConfig":
        """从环境变量加载配置，未设置的项使用默认值"""
        config = cls()

        exam_types = _split_env_list(os.getenv("GRADEBOOK_EXAM_TYPES"))
        if exam_types:
            config.exam_types = exam_types

        excluded = os.getenv("GRADEBOOK_EXCLUDED_EXAM_TYPES")
        if excluded is not None:
            config.excluded_exam_types = frozenset(_split_env_list(excluded))

        logger.debug(
            f"报表配置: exam_types={config.exam_types}, "
            f"excluded_exam_types={sorted(config.excluded_exam_types)}"
        )
        return config
