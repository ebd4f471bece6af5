# 数据源：向汇总计算提供成绩、学生、班级的完整快照
import logging
from abc import ABC, abstractmethod
from typing import List, Any, Optional, Iterable
from sqlalchemy.orm import Session

from ..database.repositories import MarkRepository, StudentRepository, ClassRepository

logger = logging.getLogger(__name__)


class DataSource(ABC):
    """数据源抽象基类，返回内存中的完整快照（不分页）"""

    @abstractmethod
    def list_marks(self) -> List[Any]:
        """获取全部成绩"""
        pass

    @abstractmethod
    def list_students(self) -> List[Any]:
        """获取全部学生"""
        pass

    @abstractmethod
    def list_classes(self) -> List[Any]:
        """获取全部班级"""
        pass


class InMemoryDataSource(DataSource):
    """内存数据源，行可以是字典或已校验的记录"""

    def __init__(self, marks: Optional[Iterable[Any]] = None,
                 students: Optional[Iterable[Any]] = None,
                 classes: Optional[Iterable[Any]] = None):
        self.marks = list(marks or [])
        self.students = list(students or [])
        self.classes = list(classes or [])

    def list_marks(self) -> List[Any]:
        return list(self.marks)

    def list_students(self) -> List[Any]:
        return list(self.students)

    def list_classes(self) -> List[Any]:
        return list(self.classes)


class SqlAlchemyDataSource(DataSource):
    """基于SQLAlchemy仓库的数据源"""

    def __init__(self, db_session: Session):
        self.mark_repository = MarkRepository(db_session)
        self.student_repository = StudentRepository(db_session)
        self.class_repository = ClassRepository(db_session)

    def list_marks(self) -> List[Any]:
        marks = self.mark_repository.list_all()
        logger.debug(f"已加载 {len(marks)} 条成绩记录")
        return marks

    def list_students(self) -> List[Any]:
        return self.student_repository.list_all()

    def list_classes(self) -> List[Any]:
        return self.class_repository.list_all()
