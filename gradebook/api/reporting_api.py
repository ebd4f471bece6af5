from fastapi import APIRouter, HTTPException, Query, Depends
from typing import Optional, Dict, Any
from datetime import datetime
from sqlalchemy.orm import Session
import logging

from ..calculation.calculators.grade_calculator import calculate_individual_grade
from ..database.connection import get_db
from ..services.data_source import SqlAlchemyDataSource
from ..services.report_service import ReportService, ReportNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["成绩报表API"])


def get_report_service(db: Session = Depends(get_db)) -> ReportService:
    """报表服务依赖"""
    return ReportService(SqlAlchemyDataSource(db))


def _success(data: Any) -> Dict[str, Any]:
    return {
        "code": 200,
        "message": "success",
        "data": data,
        "timestamp": datetime.utcnow().isoformat() + "Z"
    }


@router.get("/grade")
def get_grade(
    obtained: float = Query(..., ge=0, description="得分"),
    total: float = Query(..., ge=0, description="满分")
):
    """计算单项成绩等级"""
    return _success(calculate_individual_grade(obtained, total))


@router.get("/school")
def get_school_report(service: ReportService = Depends(get_report_service)):
    """获取全校汇总报表"""
    try:
        return _success(service.school_report())
    except Exception as e:
        logger.error(f"获取全校汇总报表失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"获取全校汇总报表失败: {str(e)}")


@router.get("/classes/{class_id}")
def get_class_report(class_id: str, service: ReportService = Depends(get_report_service)):
    """获取班级报表"""
    try:
        return _success(service.class_report(class_id))
    except ReportNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"获取班级报表失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"获取班级报表失败: {str(e)}")


@router.get("/students/{student_id}")
def get_student_report(student_id: str, service: ReportService = Depends(get_report_service)):
    """获取学生报表"""
    try:
        return _success(service.student_report(student_id))
    except ReportNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"获取学生报表失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"获取学生报表失败: {str(e)}")


@router.get("/termly")
def get_termly_report(
    class_id: Optional[str] = Query(None, description="班级ID，不指定则返回全部班级"),
    term: Optional[str] = Query(None, description="学期，不指定则返回全部学期"),
    service: ReportService = Depends(get_report_service)
):
    """获取学期报表"""
    try:
        return _success(service.termly_report(class_id, term))
    except Exception as e:
        logger.error(f"获取学期报表失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"获取学期报表失败: {str(e)}")


@router.get("/teachers/{teacher_id}/classes")
def get_teacher_classes(teacher_id: str, service: ReportService = Depends(get_report_service)):
    """获取教师负责的班级"""
    try:
        return _success(service.teacher_classes(teacher_id))
    except Exception as e:
        logger.error(f"获取教师班级失败: {str(e)}")
        raise HTTPException(status_code=500, detail=f"获取教师班级失败: {str(e)}")
