# 成绩报表服务
import logging
import time
import pandas as pd
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

from ..config import ReportConfig
from ..calculation.calculators import initialize_calculation_system
from ..calculation.calculators.grade_calculator import (
    calculate_grade, batch_calculate_grades, grade_distribution_from_grades
)
from ..calculation.calculators.performance_calculator import aggregate_class_student_performance
from ..calculation.engine import CalculationEngine
from ..schemas.record_schemas import (
    MarkRecord, StudentRecord, ClassRecord, validate_records,
    marks_to_frame, students_to_frame, classes_to_frame, find_class_mismatches
)
from ..utils.precision import safe_percentage, round_to
from .data_source import DataSource

logger = logging.getLogger(__name__)


class ReportNotFoundError(LookupError):
    """报表对象（班级/学生）不存在"""
    pass


@dataclass
class ReportSnapshot:
    """一次报表计算所用的数据快照"""
    marks: List[MarkRecord]
    students: List[StudentRecord]
    classes: List[ClassRecord]
    marks_frame: pd.DataFrame
    students_frame: pd.DataFrame
    classes_frame: pd.DataFrame
    warnings: List[str] = field(default_factory=list)


class ReportService:
    """成绩报表服务：班级报表、学生报表、学期报表、全校汇总"""

    def __init__(self, data_source: DataSource, config: Optional[ReportConfig] = None,
                 engine: Optional[CalculationEngine] = None):
        self.data_source = data_source
        self.config = config or ReportConfig.from_env()
        self.engine = engine or initialize_calculation_system()

    def load_snapshot(self) -> ReportSnapshot:
        """从数据源加载并校验快照"""
        marks = validate_records(MarkRecord, self.data_source.list_marks())
        students = validate_records(StudentRecord, self.data_source.list_students())
        classes = validate_records(ClassRecord, self.data_source.list_classes())

        warnings = []
        mismatches = find_class_mismatches(marks, students)
        if mismatches:
            message = f"发现{len(mismatches)}条成绩的班级与学生所在班级不一致"
            logger.warning(f"{message}: {mismatches[:5]}")
            warnings.append(message)

        return ReportSnapshot(
            marks=marks,
            students=students,
            classes=classes,
            marks_frame=marks_to_frame(marks),
            students_frame=students_to_frame(students),
            classes_frame=classes_to_frame(classes),
            warnings=warnings
        )

    def _engine_config(self, snapshot: ReportSnapshot, **extra) -> Dict[str, Any]:
        config = {
            'students': snapshot.students_frame,
            'classes': snapshot.classes_frame,
            'exam_types': self.config.exam_types,
            'excluded_exam_types': self.config.excluded_exam_types
        }
        config.update(extra)
        return config

    def school_report(self) -> Dict[str, Any]:
        """全校汇总：班级表现、考试类型汇总、等级分布"""
        start_time = time.time()
        snapshot = self.load_snapshot()
        config = self._engine_config(snapshot)

        class_result = self.engine.calculate('class_performance', snapshot.marks_frame, config)
        exam_result = self.engine.calculate('exam_summary', snapshot.marks_frame, config)
        distribution_result = self.engine.calculate('grade_distribution', snapshot.marks_frame, config)

        logger.info(f"全校汇总完成，成绩记录 {len(snapshot.marks)} 条，耗时 {time.time() - start_time:.2f}s")

        return {
            'class_performance': class_result['class_performance'],
            'exam_summary': exam_result['exam_summary'],
            'grade_distribution': distribution_result['distribution'],
            'graded_students': distribution_result['graded_students'],
            'total_students': len(snapshot.students),
            'total_classes': len(snapshot.classes),
            'total_marks_recorded': len(snapshot.marks),
            'validation_warnings': snapshot.warnings + class_result['_meta']['validation_warnings']
        }

    def class_report(self, class_id: str) -> Dict[str, Any]:
        """
        班级报表

        Raises:
            ReportNotFoundError: 班级不存在
        """
        snapshot = self.load_snapshot()
        class_info = next((c for c in snapshot.classes if c.id == class_id), None)
        if class_info is None:
            raise ReportNotFoundError(f"班级 {class_id} 不存在")

        marks = snapshot.marks_frame
        class_marks = marks[marks['class_id'] == class_id]

        student_performance = aggregate_class_student_performance(
            class_id, snapshot.students_frame, class_marks, self.config.excluded_exam_types
        )
        exam_result = self.engine.calculate(
            'exam_summary', class_marks, self._engine_config(snapshot)
        )
        distribution = grade_distribution_from_grades([p.grade for p in student_performance])

        if student_performance:
            average = sum(p.percentage for p in student_performance) / len(student_performance)
        else:
            average = 0
        students = snapshot.students_frame

        return {
            'class_info': class_info.model_dump(),
            'student_performance': [p.to_dict() for p in student_performance],
            'exam_type_summary': exam_result['exam_summary'],
            'grade_distribution': distribution.to_dict(),
            'student_count': int((students['class_id'] == class_id).sum()),
            'average_percentage': round_to(average, self.config.display_precision),
            'total_marks_recorded': len(class_marks)
        }

    def student_report(self, student_id: str) -> Dict[str, Any]:
        """
        学生报表：按考试类型分项汇总及总评

        总评不含小测；没有可计入总评的成绩时overall为None。

        Raises:
            ReportNotFoundError: 学生不存在
        """
        snapshot = self.load_snapshot()
        student = next((s for s in snapshot.students if s.id == student_id), None)
        if student is None:
            raise ReportNotFoundError(f"学生 {student_id} 不存在")

        marks = snapshot.marks_frame
        student_marks = marks[marks['student_id'] == student_id]

        exam_summary = []
        for exam_type in self.config.exam_types:
            exam_marks = student_marks[student_marks['exam_type'] == exam_type]
            if exam_marks.empty:
                continue
            obtained = float(exam_marks['marks_obtained'].sum())
            total = float(exam_marks['total_marks'].sum())
            exam_summary.append({
                'exam_type': exam_type,
                'marks_obtained': obtained,
                'total_marks': total,
                'percentage': round_to(safe_percentage(obtained, total), self.config.display_precision),
                'grade': calculate_grade(obtained, total),
                'subjects': len(exam_marks)
            })

        overall_result = self.engine.calculate(
            'student_performance', student_marks,
            self._engine_config(snapshot, student_id=student_id, name=student.full_name)
        )

        return {
            'student': student.model_dump(),
            'exam_summary': exam_summary,
            'overall': overall_result['student_performance'],
            'exam_count': len(exam_summary),
            'subject_count': int(student_marks['subject'].nunique())
        }

    def termly_report(self, class_id: Optional[str] = None, term: Optional[str] = None) -> Dict[str, Any]:
        """学期报表：按班级、学期过滤后的逐条成绩导出行"""
        snapshot = self.load_snapshot()
        marks = snapshot.marks_frame
        if class_id:
            marks = marks[marks['class_id'] == class_id]
        if term:
            marks = marks[marks['term'] == term]

        if marks.empty:
            average_marks = 0.0
        else:
            average_marks = round_to(marks['marks_obtained'].mean(), self.config.average_precision)

        student_names = dict(zip(snapshot.students_frame['id'], snapshot.students_frame['name']))
        class_names = dict(zip(snapshot.classes_frame['id'], snapshot.classes_frame['class_name']))

        rows = []
        for mark in batch_calculate_grades(marks).itertuples(index=False):
            rows.append({
                'student_name': student_names.get(mark.student_id, 'Unknown'),
                'class': class_names.get(mark.class_id, 'Unknown'),
                'subject': mark.subject,
                'exam_type': mark.exam_type,
                'marks_obtained': float(mark.marks_obtained),
                'total_marks': float(mark.total_marks),
                'percentage': round_to(mark.percentage, self.config.export_precision),
                'grade': mark.grade,
                'term': mark.term,
                'academic_year': mark.academic_year
            })

        return {
            'class_id': class_id,
            'term': term,
            'total': len(marks),
            'average_marks': average_marks,
            'rows': rows
        }

    def teacher_classes(self, teacher_id: str) -> List[Dict[str, Any]]:
        """教师负责的班级"""
        classes = validate_records(ClassRecord, self.data_source.list_classes())
        return [c.model_dump() for c in classes if c.teacher_id == teacher_id]
