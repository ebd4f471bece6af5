# 汇总结果类（按需计算，不落库）
from typing import Dict, Any
from dataclasses import dataclass, asdict


@dataclass
class StudentPerformance:
    """学生总评"""
    student_id: str
    name: str
    marks_obtained_sum: float
    total_marks_sum: float
    percentage: int
    grade: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ClassPerformance:
    """班级表现"""
    class_id: str
    name: str
    percentage: int
    student_count: int
    marks_count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ExamSummary:
    """考试类型汇总"""
    exam_type: str
    percentage: int
    marks_count: int
    student_count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class GradeDistribution:
    """等级分布直方图"""
    A: int = 0
    B: int = 0
    C: int = 0
    D: int = 0
    F: int = 0

    def add(self, grade: str):
        setattr(self, grade, getattr(self, grade) + 1)

    @property
    def total(self) -> int:
        return self.A + self.B + self.C + self.D + self.F

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
