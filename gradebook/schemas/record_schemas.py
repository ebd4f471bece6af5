# 成绩、学生、班级记录模型（数据访问边界的校验层）
import logging
from typing import List, Optional, Dict, Any, Iterable, Type, TypeVar

import pandas as pd
from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

MARK_COLUMNS = [
    'student_id', 'class_id', 'subject', 'exam_type',
    'marks_obtained', 'total_marks', 'term', 'academic_year'
]
STUDENT_COLUMNS = ['id', 'first_name', 'last_name', 'class_id']
CLASS_COLUMNS = ['id', 'class_name', 'teacher_id']


class RecordValidationError(ValueError):
    """记录校验失败"""

    def __init__(self, record_type: str, index: int, errors: List[Dict[str, Any]]):
        self.record_type = record_type
        self.index = index
        self.errors = errors
        fields = ', '.join('.'.join(str(loc) for loc in e.get('loc', ())) for e in errors)
        super().__init__(f"{record_type}记录校验失败(第{index}条): {fields}")


def _coerce_id(value: Any) -> Any:
    if value is None:
        return value
    return str(value)


class MarkRecord(BaseModel):
    """成绩记录：一名学生一门科目一次考试的得分"""
    student_id: str = Field(..., min_length=1, description="学生ID")
    class_id: str = Field(..., min_length=1, description="班级ID")
    subject: str = Field(..., description="科目")
    exam_type: str = Field(..., description="考试类型")
    marks_obtained: float = Field(..., ge=0, description="得分")
    total_marks: float = Field(..., ge=0, description="满分，0表示百分比按0处理")
    term: Optional[str] = Field(None, description="学期")
    academic_year: Optional[str] = Field(None, description="学年")

    @field_validator('student_id', 'class_id', mode='before')
    @classmethod
    def coerce_ids(cls, value):
        return _coerce_id(value)

    class Config:
        from_attributes = True


class StudentRecord(BaseModel):
    """学生记录"""
    id: str = Field(..., min_length=1, description="学生ID")
    first_name: str = Field(..., description="名")
    last_name: str = Field(..., description="姓")
    class_id: str = Field(..., min_length=1, description="所在班级ID")

    @field_validator('id', 'class_id', mode='before')
    @classmethod
    def coerce_ids(cls, value):
        return _coerce_id(value)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    class Config:
        from_attributes = True


class ClassRecord(BaseModel):
    """班级记录"""
    id: str = Field(..., min_length=1, description="班级ID")
    class_name: str = Field(..., description="班级名称")
    teacher_id: Optional[str] = Field(None, description="班主任/任课教师ID")

    @field_validator('id', 'teacher_id', mode='before')
    @classmethod
    def coerce_ids(cls, value):
        return _coerce_id(value)

    class Config:
        from_attributes = True


RecordT = TypeVar('RecordT', bound=BaseModel)


def validate_records(model: Type[RecordT], rows: Iterable[Any]) -> List[RecordT]:
    """
    将原始行（字典、ORM对象或已校验记录）转换为校验后的记录

    Raises:
        RecordValidationError: 任一记录缺少必需字段或取值非法
    """
    records = []
    for index, row in enumerate(rows):
        if isinstance(row, model):
            records.append(row)
            continue
        try:
            if isinstance(row, dict):
                records.append(model.model_validate(row))
            else:
                records.append(model.model_validate(row, from_attributes=True))
        except ValidationError as e:
            logger.error(f"{model.__name__} 第{index}条记录校验失败: {e.errors()}")
            raise RecordValidationError(model.__name__, index, e.errors()) from e
    return records


def marks_to_frame(marks: Iterable[MarkRecord]) -> pd.DataFrame:
    """成绩记录转换为数据框"""
    rows = [mark.model_dump() for mark in marks]
    return pd.DataFrame(rows, columns=MARK_COLUMNS)


def students_to_frame(students: Iterable[StudentRecord]) -> pd.DataFrame:
    """学生记录转换为数据框，附带name列"""
    rows = []
    for student in students:
        row = student.model_dump()
        row['name'] = student.full_name
        rows.append(row)
    return pd.DataFrame(rows, columns=STUDENT_COLUMNS + ['name'])


def classes_to_frame(classes: Iterable[ClassRecord]) -> pd.DataFrame:
    """班级记录转换为数据框"""
    rows = [cls.model_dump() for cls in classes]
    return pd.DataFrame(rows, columns=CLASS_COLUMNS)


def find_class_mismatches(marks: Iterable[MarkRecord], students: Iterable[StudentRecord]) -> List[Dict[str, Any]]:
    """查找成绩班级与学生所在班级不一致的记录"""
    student_classes = {s.id: s.class_id for s in students}
    mismatches = []
    for mark in marks:
        expected = student_classes.get(mark.student_id)
        if expected is not None and expected != mark.class_id:
            mismatches.append({
                'student_id': mark.student_id,
                'mark_class_id': mark.class_id,
                'student_class_id': expected
            })
    return mismatches
