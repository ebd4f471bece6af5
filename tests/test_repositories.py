import pytest
from unittest.mock import MagicMock
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gradebook.config import ReportConfig
from gradebook.database.connection import build_engine, create_tables
from gradebook.database.models import SchoolClass, Student, Mark
from gradebook.database.repositories import (
    ClassRepository, StudentRepository, MarkRepository, RepositoryError
)
from gradebook.schemas.record_schemas import MarkRecord, StudentRecord, ClassRecord
from gradebook.services.data_source import SqlAlchemyDataSource
from gradebook.services.report_service import ReportService


@pytest.fixture
def db_session(sample_classes, sample_students, sample_marks):
    """内存SQLite数据库会话，预置测试数据"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    create_tables(bind=engine)
    Session = sessionmaker(bind=engine, autoflush=False)
    session = Session()

    session.add_all([SchoolClass(**row) for row in sample_classes])
    session.add_all([Student(**row) for row in sample_students])
    session.add_all([Mark(id=f"m{index}", **row) for index, row in enumerate(sample_marks, start=1)])
    session.commit()

    yield session

    session.close()
    engine.dispose()


class TestRepositories:
    """测试只读数据仓库"""

    def test_list_all(self, db_session):
        assert [c.id for c in ClassRepository(db_session).list_all()] == ['c1', 'c2', 'c3']
        assert [s.id for s in StudentRepository(db_session).list_all()] == ['s1', 's2', 's3', 's4']
        assert len(MarkRepository(db_session).list_all()) == 7

    def test_list_all_empty(self):
        engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
        create_tables(bind=engine)
        session = sessionmaker(bind=engine)()

        assert MarkRepository(session).list_all() == []
        session.close()

    def test_database_error(self):
        """数据库异常转换为RepositoryError并回滚"""
        mock_db = MagicMock()
        mock_db.query.side_effect = SQLAlchemyError("connection lost")
        repo = MarkRepository(mock_db)

        with pytest.raises(RepositoryError, match="数据库操作失败"):
            repo.list_all()

        mock_db.rollback.assert_called_once()


class TestSqlAlchemyDataSource:
    """测试基于数据库的报表计算"""

    def test_school_report_from_database(self, db_session):
        service = ReportService(SqlAlchemyDataSource(db_session), ReportConfig())
        report = service.school_report()

        assert [c['percentage'] for c in report['class_performance']] == [69, 25]
        assert report['grade_distribution'] == {'A': 1, 'B': 0, 'C': 1, 'D': 0, 'F': 1}
        assert report['total_marks_recorded'] == 7

    def test_student_report_from_database(self, db_session):
        service = ReportService(SqlAlchemyDataSource(db_session), ReportConfig())
        report = service.student_report('s1')

        assert report['overall']['name'] == 'Alice Mwangi'
        assert report['overall']['percentage'] == 80
        assert report['overall']['grade'] == 'A'

    def test_class_report_from_database(self, db_session):
        service = ReportService(SqlAlchemyDataSource(db_session), ReportConfig())
        report = service.class_report('c1')

        assert report['class_info']['class_name'] == 'Form 1A'
        assert report['average_percentage'] == 67


class TestModels:
    """测试表结构与记录模型一致"""

    @pytest.mark.parametrize("model,record", [
        (SchoolClass, ClassRecord),
        (Student, StudentRecord),
        (Mark, MarkRecord),
    ])
    def test_columns_match_records(self, model, record):
        """除主键和时间戳外，每一列都由记录模型读取"""
        columns = set(model.__table__.columns.keys()) - {'created_at', 'updated_at'}
        if model is Mark:
            columns.discard('id')
        assert columns == set(record.model_fields)

    def test_student_class_required(self):
        assert Student.__table__.columns['class_id'].nullable is False


class TestConnection:
    """测试数据库引擎配置"""

    def test_build_sqlite_engine(self):
        engine = build_engine("sqlite://")
        assert engine.dialect.name == 'sqlite'
        engine.dispose()
