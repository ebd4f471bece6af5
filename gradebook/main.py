from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gradebook.api.reporting_api import router as reporting_router
from gradebook.database.connection import check_connection

app = FastAPI(
    title="学业表现汇总服务",
    description="成绩汇总与等级报表API文档",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# 配置CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # 生产环境请设置具体的域名
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册路由
app.include_router(reporting_router, prefix="/api/v1/reports", tags=["成绩报表API"])


@app.get("/")
async def root():
    return {
        "message": "学业表现汇总服务",
        "version": "1.0.0",
        "status": "running"
    }


@app.get("/health")
def health_check():
    database_ok = check_connection()
    return {
        "status": "healthy" if database_ok else "degraded",
        "database": "connected" if database_ok else "unavailable"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("gradebook.main:app", host="0.0.0.0", port=8000, reload=False)
