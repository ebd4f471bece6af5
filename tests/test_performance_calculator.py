# 学业表现汇总计算测试
import pytest
import pandas as pd

from gradebook.calculation.calculators.performance_calculator import (
    aggregate_student_performance,
    aggregate_class_student_performance,
    aggregate_class_performance,
    aggregate_exam_summary,
    aggregate_grade_distribution,
    prepare_students_frame
)
from gradebook.database.enums import EXAM_TYPES


def _mark(student_id, class_id, exam_type, obtained, total, subject='Mathematics'):
    return {
        'student_id': student_id, 'class_id': class_id, 'subject': subject,
        'exam_type': exam_type, 'marks_obtained': obtained, 'total_marks': total,
        'term': 'Term 1', 'academic_year': '2024'
    }


class TestStudentPerformance:
    """测试学生总评"""

    def test_quiz_excluded(self):
        """小测不计入总评"""
        marks = pd.DataFrame([
            _mark('s1', 'c1', 'Final', 90, 100),
            _mark('s1', 'c1', 'Quiz', 5, 10),
        ])

        result = aggregate_student_performance('s1', 'c1', marks)

        assert result.marks_obtained_sum == 90
        assert result.total_marks_sum == 100
        assert result.percentage == 90
        assert result.grade == 'A'

    def test_only_quiz_marks_is_absent(self):
        """只有小测成绩的学生没有总评，而不是零分"""
        marks = pd.DataFrame([_mark('s1', 'c1', 'Quiz', 8, 10)])
        assert aggregate_student_performance('s1', 'c1', marks) is None

    def test_no_marks_is_absent(self):
        marks = pd.DataFrame([_mark('s2', 'c1', 'Final', 50, 100)])
        assert aggregate_student_performance('s1', 'c1', marks) is None

    def test_class_filter(self):
        """按班级过滤，其他班级的成绩不计入"""
        marks = pd.DataFrame([
            _mark('s1', 'c1', 'Final', 40, 100),
            _mark('s1', 'c2', 'Final', 100, 100),
        ])

        in_class = aggregate_student_performance('s1', 'c1', marks)
        assert in_class.percentage == 40
        assert in_class.grade == 'C'

        all_classes = aggregate_student_performance('s1', None, marks)
        assert all_classes.percentage == 70
        assert all_classes.grade == 'B'

    def test_custom_exclusion(self):
        """不排除任何考试类型时小测计入"""
        marks = pd.DataFrame([
            _mark('s1', 'c1', 'Final', 90, 100),
            _mark('s1', 'c1', 'Quiz', 0, 100),
        ])

        result = aggregate_student_performance('s1', 'c1', marks, excluded_exam_types=set())
        assert result.percentage == 45
        assert result.grade == 'C'

    def test_zero_total_marks(self):
        """满分为0的成绩仍是数据，百分比按0处理"""
        marks = pd.DataFrame([_mark('s1', 'c1', 'Final', 0, 0)])

        result = aggregate_student_performance('s1', 'c1', marks, name='Alice')
        assert result is not None
        assert result.percentage == 0
        assert result.grade == 'F'
        assert result.name == 'Alice'

    def test_percentage_rounds_half_up(self):
        """百分比半数进位取整"""
        marks = pd.DataFrame([_mark('s1', 'c1', 'Final', 1, 8)])  # 12.5%
        result = aggregate_student_performance('s1', 'c1', marks)
        assert result.percentage == 13

    def test_to_dict(self):
        marks = pd.DataFrame([_mark('s1', 'c1', 'Final', 45, 50)])
        result = aggregate_student_performance('s1', 'c1', marks, name='Alice Mwangi')
        assert result.to_dict() == {
            'student_id': 's1',
            'name': 'Alice Mwangi',
            'marks_obtained_sum': 45.0,
            'total_marks_sum': 50.0,
            'percentage': 90,
            'grade': 'A'
        }


class TestClassStudentPerformance:
    """测试班级内学生总评列表"""

    def test_students_without_marks_omitted(self, sample_students, sample_marks):
        students = pd.DataFrame(sample_students)
        marks = pd.DataFrame(sample_marks)

        result = aggregate_class_student_performance('c1', students, marks)

        assert [p.student_id for p in result] == ['s1', 's2']
        assert [p.percentage for p in result] == [80, 53]
        assert [p.grade for p in result] == ['A', 'C']
        assert result[0].name == 'Alice Mwangi'


class TestClassPerformance:
    """测试班级表现"""

    def setup_method(self):
        self.classes = pd.DataFrame([
            {'id': 'c1', 'class_name': 'Form 1A'},
            {'id': 'c2', 'class_name': 'Form 2B'},
        ])
        self.students = pd.DataFrame([
            {'id': 's1', 'first_name': 'Alice', 'last_name': 'Mwangi', 'class_id': 'c1'},
            {'id': 's2', 'first_name': 'Brian', 'last_name': 'Otieno', 'class_id': 'c1'},
            {'id': 's3', 'first_name': 'David', 'last_name': 'Kamau', 'class_id': 'c2'},
        ])

    def test_class_percentage(self):
        """(50+30)/(100+50) = 53.3% -> 53"""
        marks = pd.DataFrame([
            _mark('s1', 'c1', 'Final', 50, 100),
            _mark('s2', 'c1', 'Mid-Term', 30, 50),
        ])

        result = aggregate_class_performance(self.classes, marks, self.students)

        assert len(result) == 1
        assert result[0].class_id == 'c1'
        assert result[0].name == 'Form 1A'
        assert result[0].percentage == 53
        assert result[0].student_count == 2
        assert result[0].marks_count == 2

    def test_class_without_marks_omitted(self):
        marks = pd.DataFrame([_mark('s3', 'c2', 'Final', 20, 40)])

        result = aggregate_class_performance(self.classes, marks, self.students)

        assert [c.class_id for c in result] == ['c2']
        assert result[0].percentage == 50

    def test_quiz_counted_in_marks_count_only(self):
        """小测计入成绩记录数，不计入百分比"""
        marks = pd.DataFrame([
            _mark('s1', 'c1', 'Final', 60, 100),
            _mark('s1', 'c1', 'Quiz', 0, 100),
        ])

        result = aggregate_class_performance(self.classes, marks, self.students)
        assert result[0].percentage == 60
        assert result[0].marks_count == 2

    def test_class_with_only_quiz_marks(self):
        """只有小测成绩的班级仍然输出，百分比为0"""
        marks = pd.DataFrame([_mark('s3', 'c2', 'Quiz', 9, 10)])

        result = aggregate_class_performance(self.classes, marks, self.students)
        assert len(result) == 1
        assert result[0].percentage == 0
        assert result[0].marks_count == 1

    def test_empty_inputs(self):
        assert aggregate_class_performance(pd.DataFrame(), pd.DataFrame(), pd.DataFrame()) == []
        assert aggregate_class_performance(self.classes, pd.DataFrame(), self.students) == []

    def test_missing_columns_raise(self):
        """非空成绩数据缺少必需字段时报错"""
        marks = pd.DataFrame([{'student_id': 's1', 'marks_obtained': 50}])
        with pytest.raises(ValueError, match="缺少必需字段"):
            aggregate_class_performance(self.classes, marks, self.students)


class TestExamSummary:
    """测试考试类型汇总"""

    def test_distinct_student_count(self):
        """同一学生两条期末成绩只计为1人"""
        marks = pd.DataFrame([
            _mark('s1', 'c1', 'Final', 70, 100, subject='Mathematics'),
            _mark('s1', 'c1', 'Final', 50, 100, subject='English'),
        ])

        result = aggregate_exam_summary(EXAM_TYPES, marks)

        assert len(result) == 1
        assert result[0].exam_type == 'Final'
        assert result[0].student_count == 1
        assert result[0].marks_count == 2
        assert result[0].percentage == 60

    def test_order_and_omission(self):
        """按固定顺序输出，没有成绩的类型不输出"""
        marks = pd.DataFrame([
            _mark('s1', 'c1', 'Monthly', 10, 20),
            _mark('s1', 'c1', 'Quiz', 3, 4),
            _mark('s2', 'c1', 'Beginning-of-Term', 1, 3),
        ])

        result = aggregate_exam_summary(EXAM_TYPES, marks)

        assert [s.exam_type for s in result] == ['Beginning-of-Term', 'Quiz', 'Monthly']
        assert [s.percentage for s in result] == [33, 75, 50]

    def test_unknown_exam_types_ignored(self):
        marks = pd.DataFrame([_mark('s1', 'c1', 'Quiz 1', 10, 10)])
        assert aggregate_exam_summary(EXAM_TYPES, marks) == []

    def test_default_exam_types(self):
        marks = pd.DataFrame([_mark('s1', 'c1', 'Mid-Term', 10, 10)])
        result = aggregate_exam_summary(None, marks)
        assert result[0].exam_type == 'Mid-Term'
        assert result[0].percentage == 100

    def test_empty_marks(self):
        assert aggregate_exam_summary(EXAM_TYPES, pd.DataFrame()) == []


class TestGradeDistribution:
    """测试全校等级分布"""

    def test_histogram_counts_graded_students_only(self, sample_classes, sample_students, sample_marks):
        """直方图合计等于有总评成绩的学生数，而非在读学生数"""
        result = aggregate_grade_distribution(
            pd.DataFrame(sample_classes), pd.DataFrame(sample_students), pd.DataFrame(sample_marks)
        )

        assert result.to_dict() == {'A': 1, 'B': 0, 'C': 1, 'D': 0, 'F': 1}
        assert result.total == 3
        assert result.total < len(sample_students)

    def test_quiz_only_student_excluded(self):
        classes = pd.DataFrame([{'id': 'c1', 'class_name': 'Form 1A'}])
        students = pd.DataFrame([
            {'id': 's1', 'first_name': 'A', 'last_name': 'B', 'class_id': 'c1'},
            {'id': 's2', 'first_name': 'C', 'last_name': 'D', 'class_id': 'c1'},
        ])
        marks = pd.DataFrame([
            _mark('s1', 'c1', 'Final', 35, 100),
            _mark('s2', 'c1', 'Quiz', 10, 10),
        ])

        result = aggregate_grade_distribution(classes, students, marks)
        assert result.to_dict() == {'A': 0, 'B': 0, 'C': 0, 'D': 1, 'F': 0}

    def test_student_outside_listed_classes_excluded(self):
        """只统计(班级, 班级内学生)组合"""
        classes = pd.DataFrame([{'id': 'c1', 'class_name': 'Form 1A'}])
        students = pd.DataFrame([
            {'id': 's1', 'first_name': 'A', 'last_name': 'B', 'class_id': 'c9'},
        ])
        marks = pd.DataFrame([_mark('s1', 'c9', 'Final', 90, 100)])

        result = aggregate_grade_distribution(classes, students, marks)
        assert result.total == 0

    def test_empty_inputs(self):
        result = aggregate_grade_distribution(None, None, None)
        assert result.to_dict() == {'A': 0, 'B': 0, 'C': 0, 'D': 0, 'F': 0}


class TestPrepareStudentsFrame:
    """测试学生数据整理"""

    def test_name_built_from_first_and_last(self):
        students = pd.DataFrame([{'id': 's1', 'first_name': 'Alice', 'last_name': 'Mwangi', 'class_id': 'c1'}])
        frame = prepare_students_frame(students)
        assert frame.iloc[0]['name'] == 'Alice Mwangi'

    def test_existing_name_kept(self):
        students = pd.DataFrame([{'id': 's1', 'class_id': 'c1', 'name': 'A. Mwangi'}])
        frame = prepare_students_frame(students)
        assert frame.iloc[0]['name'] == 'A. Mwangi'
