# 数据仓库层
from typing import List, Type, Any
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
import logging

from .models import Mark, Student, SchoolClass

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Repository层异常基类"""
    pass


class BaseRepository:
    """基础仓库类（只读：成绩录入等写操作由外部应用负责）"""

    model: Type[Any] = None

    def __init__(self, db_session: Session):
        self.db = db_session

    def _handle_db_error(self, error: Exception, operation: str) -> None:
        """统一处理数据库异常"""
        logger.error(f"Database error in {operation}: {str(error)}")
        self.db.rollback()
        raise RepositoryError(f"数据库操作失败: {str(error)}") from error

    def list_all(self) -> List[Any]:
        """获取全部记录快照"""
        try:
            return self.db.query(self.model).order_by(self.model.id).all()
        except SQLAlchemyError as e:
            self._handle_db_error(e, f"list_{self.model.__tablename__}")


class ClassRepository(BaseRepository):
    """班级数据仓库"""
    model = SchoolClass


class StudentRepository(BaseRepository):
    """学生数据仓库"""
    model = Student


class MarkRepository(BaseRepository):
    """成绩数据仓库"""
    model = Mark
