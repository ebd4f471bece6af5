# 枚举定义
import enum


class ExamType(enum.Enum):
    """考试类型枚举"""
    BEGINNING_OF_TERM = "Beginning-of-Term"
    MID_TERM = "Mid-Term"
    FINAL = "Final"
    QUIZ = "Quiz"
    MONTHLY = "Monthly"


class Grade(enum.Enum):
    """成绩等级枚举"""
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"


# 报表固定的考试类型顺序
EXAM_TYPES = [exam_type.value for exam_type in ExamType]

# 小测为形成性评价，不计入总评等级
DEFAULT_EXCLUDED_EXAM_TYPES = frozenset({ExamType.QUIZ.value})

GRADE_SYMBOLS = [grade.value for grade in Grade]
