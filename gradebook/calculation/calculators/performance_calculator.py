# 学业表现汇总计算器
import pandas as pd
import logging
from typing import Dict, Any, List, Optional, Iterable, Tuple
from ..engine import StatisticalStrategy, DataValidator
from ..results import StudentPerformance, ClassPerformance, ExamSummary, GradeDistribution
from .grade_calculator import GradeConfig, grade_for_percentage
from ...utils.precision import safe_percentage, round_percentage
from ...database.enums import EXAM_TYPES, DEFAULT_EXCLUDED_EXAM_TYPES, GRADE_SYMBOLS
from ...schemas.record_schemas import MARK_COLUMNS, STUDENT_COLUMNS, CLASS_COLUMNS

logger = logging.getLogger(__name__)

AGGREGATION_COLUMNS = ['student_id', 'class_id', 'exam_type', 'marks_obtained', 'total_marks']


def _ensure_columns(frame: Optional[pd.DataFrame], columns: List[str],
                    required: List[str], frame_name: str) -> pd.DataFrame:
    """补齐空数据框的列；非空数据框缺少必需列时报错"""
    if frame is None:
        return pd.DataFrame(columns=columns)

    frame = frame.copy()
    missing = [col for col in required if col not in frame.columns]
    if missing and not frame.empty:
        raise ValueError(f"{frame_name}缺少必需字段: {missing}")
    for col in columns:
        if col not in frame.columns:
            frame[col] = pd.Series(dtype=object)
    return frame


def prepare_marks_frame(marks: Optional[pd.DataFrame]) -> pd.DataFrame:
    """整理成绩数据框，分数转为数值，无法解析的按0处理"""
    frame = _ensure_columns(marks, MARK_COLUMNS, AGGREGATION_COLUMNS, '成绩数据')
    frame['marks_obtained'] = pd.to_numeric(frame['marks_obtained'], errors='coerce').fillna(0.0).astype(float)
    frame['total_marks'] = pd.to_numeric(frame['total_marks'], errors='coerce').fillna(0.0).astype(float)
    return frame


def prepare_students_frame(students: Optional[pd.DataFrame]) -> pd.DataFrame:
    """整理学生数据框，缺少name列时由姓名拼接"""
    frame = _ensure_columns(students, STUDENT_COLUMNS, ['id', 'class_id'], '学生数据')
    if 'name' not in frame.columns:
        if frame.empty:
            frame['name'] = pd.Series(dtype=object)
        else:
            first = frame['first_name'].fillna('').astype(str)
            last = frame['last_name'].fillna('').astype(str)
            frame['name'] = (first + ' ' + last).str.strip()
    return frame


def prepare_classes_frame(classes: Optional[pd.DataFrame]) -> pd.DataFrame:
    """整理班级数据框"""
    return _ensure_columns(classes, CLASS_COLUMNS, ['id'], '班级数据')


def _summative(frame: pd.DataFrame, excluded_exam_types: Iterable[str]) -> pd.DataFrame:
    """去除不计入总评的考试类型（默认为小测）"""
    return frame[~frame['exam_type'].isin(list(excluded_exam_types))]


def _sums(frame: pd.DataFrame) -> Tuple[float, float]:
    return float(frame['marks_obtained'].sum()), float(frame['total_marks'].sum())


def _student_totals(marks: pd.DataFrame,
                    excluded_exam_types: Iterable[str]) -> Dict[Tuple[Any, Any], Tuple[float, float]]:
    """按(学生, 班级)汇总总评得分与满分"""
    graded = _summative(marks, excluded_exam_types)
    if graded.empty:
        return {}
    grouped = graded.groupby(['student_id', 'class_id'])[['marks_obtained', 'total_marks']].sum()
    return {
        key: (float(row['marks_obtained']), float(row['total_marks']))
        for key, row in grouped.iterrows()
    }


def _build_student_performance(student_id: Any, name: str,
                               obtained: float, total: float) -> StudentPerformance:
    percentage = safe_percentage(obtained, total)
    return StudentPerformance(
        student_id=student_id,
        name=name,
        marks_obtained_sum=obtained,
        total_marks_sum=total,
        percentage=round_percentage(percentage),
        grade=grade_for_percentage(percentage)
    )


def aggregate_student_performance(student_id: Any, class_id: Optional[Any], marks: pd.DataFrame,
                                  excluded_exam_types: Iterable[str] = DEFAULT_EXCLUDED_EXAM_TYPES,
                                  name: str = '') -> Optional[StudentPerformance]:
    """
    计算单个学生的总评

    Args:
        student_id: 学生ID
        class_id: 班级ID，为None时不按班级过滤
        marks: 成绩数据框
        excluded_exam_types: 不计入总评的考试类型
        name: 学生姓名

    Returns:
        学生总评；没有可计入的成绩时返回None（无数据不等于零分）
    """
    frame = prepare_marks_frame(marks)
    mask = frame['student_id'] == student_id
    if class_id is not None:
        mask &= frame['class_id'] == class_id
    student_marks = _summative(frame[mask], excluded_exam_types)

    if student_marks.empty:
        return None

    obtained, total = _sums(student_marks)
    return _build_student_performance(student_id, name, obtained, total)


def aggregate_class_student_performance(class_id: Any, students: pd.DataFrame, marks: pd.DataFrame,
                                        excluded_exam_types: Iterable[str] = DEFAULT_EXCLUDED_EXAM_TYPES
                                        ) -> List[StudentPerformance]:
    """计算班级内每名学生的总评，无成绩的学生不出现在结果中"""
    frame = prepare_marks_frame(marks)
    students = prepare_students_frame(students)
    totals = _student_totals(frame, excluded_exam_types)

    results = []
    class_students = students[students['class_id'] == class_id]
    for student in class_students.itertuples(index=False):
        key = (student.id, class_id)
        if key not in totals:
            continue
        obtained, total = totals[key]
        results.append(_build_student_performance(student.id, student.name, obtained, total))
    return results


def aggregate_class_performance(classes: pd.DataFrame, marks: pd.DataFrame, students: pd.DataFrame,
                                excluded_exam_types: Iterable[str] = DEFAULT_EXCLUDED_EXAM_TYPES
                                ) -> List[ClassPerformance]:
    """
    计算各班级表现

    没有任何成绩记录的班级不出现在结果中。
    百分比只统计计入总评的成绩；marks_count统计该班全部成绩记录（含小测）。
    """
    frame = prepare_marks_frame(marks)
    classes = prepare_classes_frame(classes)
    students = prepare_students_frame(students)

    results = []
    for cls in classes.itertuples(index=False):
        class_marks = frame[frame['class_id'] == cls.id]
        if class_marks.empty:
            continue

        obtained, total = _sums(_summative(class_marks, excluded_exam_types))
        results.append(ClassPerformance(
            class_id=cls.id,
            name=cls.class_name,
            percentage=round_percentage(safe_percentage(obtained, total)),
            student_count=int((students['class_id'] == cls.id).sum()),
            marks_count=len(class_marks)
        ))
    return results


def aggregate_exam_summary(exam_types: Optional[Iterable[str]], marks: pd.DataFrame) -> List[ExamSummary]:
    """
    按考试类型汇总

    考试类型按给定顺序输出，没有成绩的类型不出现在结果中；
    student_count为不同学生数。
    """
    frame = prepare_marks_frame(marks)
    exam_types = list(exam_types) if exam_types is not None else EXAM_TYPES

    results = []
    for exam_type in exam_types:
        exam_marks = frame[frame['exam_type'] == exam_type]
        if exam_marks.empty:
            continue

        obtained, total = _sums(exam_marks)
        results.append(ExamSummary(
            exam_type=exam_type,
            percentage=round_percentage(safe_percentage(obtained, total)),
            marks_count=len(exam_marks),
            student_count=int(exam_marks['student_id'].nunique())
        ))
    return results


def aggregate_grade_distribution(classes: pd.DataFrame, students: pd.DataFrame, marks: pd.DataFrame,
                                 excluded_exam_types: Iterable[str] = DEFAULT_EXCLUDED_EXAM_TYPES
                                 ) -> GradeDistribution:
    """
    计算全校等级分布

    对每个(班级, 班级内学生)计算总评等级并计数；
    没有可计入成绩的学生不参与统计。
    """
    frame = prepare_marks_frame(marks)
    classes = prepare_classes_frame(classes)
    students = prepare_students_frame(students)
    totals = _student_totals(frame, excluded_exam_types)

    distribution = GradeDistribution()
    for cls in classes.itertuples(index=False):
        class_students = students[students['class_id'] == cls.id]
        for student_id in class_students['id']:
            key = (student_id, cls.id)
            if key not in totals:
                continue
            obtained, total = totals[key]
            distribution.add(grade_for_percentage(safe_percentage(obtained, total)))

    logger.debug(f"等级分布: {distribution.to_dict()}")
    return distribution


class MarksStrategy(StatisticalStrategy):
    """基于成绩数据框的汇总策略基类"""

    def __init__(self):
        self.validator = DataValidator()

    def validate_input(self, data: pd.DataFrame, config: Dict[str, Any]) -> Dict[str, Any]:
        """验证输入数据"""
        return self.validator.validate_marks(data, AGGREGATION_COLUMNS)

    @staticmethod
    def excluded_exam_types(config: Dict[str, Any]) -> Iterable[str]:
        return config.get('excluded_exam_types', DEFAULT_EXCLUDED_EXAM_TYPES)


class StudentPerformanceStrategy(MarksStrategy):
    """单个学生总评计算策略"""

    def calculate(self, data: pd.DataFrame, config: Dict[str, Any]) -> Dict[str, Any]:
        student_id = config['student_id']
        name = config.get('name', '')
        students = config.get('students')
        if not name and students is not None:
            students = prepare_students_frame(students)
            matched = students[students['id'] == student_id]
            if not matched.empty:
                name = matched.iloc[0]['name']

        performance = aggregate_student_performance(
            student_id, config.get('class_id'), data,
            self.excluded_exam_types(config), name
        )
        return {
            'student_performance': performance.to_dict() if performance else None,
            'has_marks': performance is not None
        }

    def validate_input(self, data: pd.DataFrame, config: Dict[str, Any]) -> Dict[str, Any]:
        validation_result = super().validate_input(data, config)
        if config.get('student_id') is None:
            validation_result['is_valid'] = False
            validation_result['errors'].append("缺少必需参数: student_id")
        return validation_result

    def get_algorithm_info(self) -> Dict[str, str]:
        return {
            'name': 'StudentPerformance',
            'version': '1.0',
            'description': '学生总评：得分合计/满分合计，不含小测',
            'rounding': 'half_up_integer'
        }


class ClassPerformanceStrategy(MarksStrategy):
    """班级表现计算策略"""

    def calculate(self, data: pd.DataFrame, config: Dict[str, Any]) -> Dict[str, Any]:
        performances = aggregate_class_performance(
            config.get('classes'), data, config.get('students'),
            self.excluded_exam_types(config)
        )
        return {
            'class_performance': [p.to_dict() for p in performances],
            'class_count': len(performances)
        }

    def get_algorithm_info(self) -> Dict[str, str]:
        return {
            'name': 'ClassPerformance',
            'version': '1.0',
            'description': '班级表现：班级总评百分比、学生数、成绩记录数',
            'rounding': 'half_up_integer'
        }


class ExamSummaryStrategy(MarksStrategy):
    """考试类型汇总策略"""

    def calculate(self, data: pd.DataFrame, config: Dict[str, Any]) -> Dict[str, Any]:
        summaries = aggregate_exam_summary(config.get('exam_types'), data)
        return {
            'exam_summary': [s.to_dict() for s in summaries],
            'exam_type_count': len(summaries)
        }

    def get_algorithm_info(self) -> Dict[str, str]:
        return {
            'name': 'ExamSummary',
            'version': '1.0',
            'description': '按考试类型汇总得分率与参考人数',
            'exam_types': ', '.join(EXAM_TYPES)
        }


class GradeDistributionStrategy(MarksStrategy):
    """全校等级分布计算策略"""

    def calculate(self, data: pd.DataFrame, config: Dict[str, Any]) -> Dict[str, Any]:
        distribution = aggregate_grade_distribution(
            config.get('classes'), config.get('students'), data,
            self.excluded_exam_types(config)
        )
        total = distribution.total

        return {
            'distribution': distribution.to_dict(),
            'graded_students': total,
            'rates': {
                grade: (getattr(distribution, grade) / total if total > 0 else 0.0)
                for grade in GRADE_SYMBOLS
            },
            'labels': GradeConfig.get_grade_names(),
            'thresholds_used': GradeConfig.get_thresholds()
        }

    def get_algorithm_info(self) -> Dict[str, str]:
        return {
            'name': 'GradeDistribution',
            'version': '1.0',
            'description': '全校学生总评等级分布（不含小测）',
            'standard': 'A≥80%, B60-79%, C40-59%, D30-39%, F<30%'
        }
