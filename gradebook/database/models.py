# SQLAlchemy模型定义
from sqlalchemy import Column, String, DateTime, Float, ForeignKey, func
from .connection import Base


class SchoolClass(Base):
    """班级模型"""
    __tablename__ = "classes"

    id = Column(String(36), primary_key=True, index=True)
    class_name = Column(String(100), nullable=False)
    teacher_id = Column(String(36), index=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Student(Base):
    """学生模型"""
    __tablename__ = "students"

    id = Column(String(36), primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    class_id = Column(String(36), ForeignKey("classes.id"), nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Mark(Base):
    """成绩模型"""
    __tablename__ = "marks"

    id = Column(String(36), primary_key=True, index=True)
    student_id = Column(String(36), ForeignKey("students.id"), nullable=False, index=True)
    class_id = Column(String(36), ForeignKey("classes.id"), nullable=False, index=True)
    subject = Column(String(100), nullable=False)
    exam_type = Column(String(50), nullable=False, index=True)
    marks_obtained = Column(Float, nullable=False, default=0)
    total_marks = Column(Float, nullable=False, default=100)
    term = Column(String(50), index=True)
    academic_year = Column(String(20))
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
