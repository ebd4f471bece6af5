# 测试公共数据
import pytest


@pytest.fixture
def sample_classes():
    """班级：c3没有任何成绩"""
    return [
        {'id': 'c1', 'class_name': 'Form 1A', 'teacher_id': 't1'},
        {'id': 'c2', 'class_name': 'Form 2B', 'teacher_id': 't2'},
        {'id': 'c3', 'class_name': 'Form 3C', 'teacher_id': 't1'},
    ]


@pytest.fixture
def sample_students():
    """学生：s3没有任何成绩"""
    return [
        {'id': 's1', 'first_name': 'Alice', 'last_name': 'Mwangi', 'class_id': 'c1'},
        {'id': 's2', 'first_name': 'Brian', 'last_name': 'Otieno', 'class_id': 'c1'},
        {'id': 's3', 'first_name': 'Cynthia', 'last_name': 'Wanjiru', 'class_id': 'c1'},
        {'id': 's4', 'first_name': 'David', 'last_name': 'Kamau', 'class_id': 'c2'},
    ]


@pytest.fixture
def sample_marks():
    """成绩：s1总评160/200(A)，s2总评80/150(C)，s4总评25/100(F)"""
    def mark(student_id, class_id, subject, exam_type, obtained, total, term):
        return {
            'student_id': student_id, 'class_id': class_id, 'subject': subject,
            'exam_type': exam_type, 'marks_obtained': obtained, 'total_marks': total,
            'term': term, 'academic_year': '2024'
        }

    return [
        mark('s1', 'c1', 'Mathematics', 'Final', 90, 100, 'Term 1'),
        mark('s1', 'c1', 'English', 'Mid-Term', 70, 100, 'Term 1'),
        mark('s1', 'c1', 'Mathematics', 'Quiz', 5, 10, 'Term 1'),
        mark('s2', 'c1', 'Mathematics', 'Final', 50, 100, 'Term 2'),
        mark('s2', 'c1', 'English', 'Final', 30, 50, 'Term 2'),
        mark('s4', 'c2', 'Mathematics', 'Final', 25, 100, 'Term 1'),
        mark('s4', 'c2', 'Science', 'Quiz', 10, 10, 'Term 1'),
    ]
